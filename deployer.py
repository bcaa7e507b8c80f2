import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from models.deploy_outcome import DeployOutcome

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class ScriptRunner:
    """
    Runs deploy scripts with a fixed shell interpreter and reports how they went.

    The awaiting request waits until the script exits, but each script is its
    own child process, so a hung script only holds up the request that started it.
    With a timeout the script is killed once it runs past it; without one (the
    default) it may run forever.
    When `serialize` is enabled, runs for the same repository wait for each
    other instead of overlapping.
    """

    def __init__(self, shell_path: str, timeout: Optional[float] = None, serialize: bool = False):
        self.shell_path = shell_path
        self.timeout = timeout
        self.serialize = serialize
        self._locks = {}

    async def run(self, repo_name: str, script_path: str) -> DeployOutcome:
        async with self._repository_lock(repo_name):
            return await self._execute(script_path)

    @asynccontextmanager
    async def _repository_lock(self, repo_name: str):
        if not self.serialize:
            yield
            return

        lock = self._locks.setdefault(repo_name, asyncio.Lock())
        if lock.locked():
            logger.info(f"Deploy already running for '{repo_name}'. Waiting for it to finish.")
        async with lock:
            yield

    async def _execute(self, script_path: str) -> DeployOutcome:
        logger.debug(f"Executing command: {self.shell_path} {script_path}")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.shell_path,
                script_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT
            )
        except OSError as e:
            # The interpreter itself could not be started.
            return DeployOutcome(success=False, output=str(e).encode(), error=f"could not start: {e}")

        # Collected as it arrives so a killed script still reports what it printed.
        chunks = []

        async def collect_output():
            while True:
                chunk = await proc.stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
            return await proc.wait()

        try:
            exit_code = await asyncio.wait_for(collect_output(), timeout=self.timeout)
        except asyncio.TimeoutError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            return DeployOutcome(
                success=False,
                output=b"".join(chunks),
                timed_out=True,
                error=f"timed out after {self.timeout} seconds"
            )

        logger.debug(f"Command '{script_path}' exit status: {exit_code}")
        return DeployOutcome(
            success=exit_code == 0,
            output=b"".join(chunks),
            exit_code=exit_code
        )
