# dependencies.py

from config import DEPLOY_SCRIPTS, SHELL_PATH, DEPLOY_TIMEOUT, SERIALIZE_DEPLOYS
from deployer import ScriptRunner
from models.registry import RepositoryRegistry

# Built once at startup and shared by every request.
registry = RepositoryRegistry(scripts=DEPLOY_SCRIPTS)
runner = ScriptRunner(SHELL_PATH, timeout=DEPLOY_TIMEOUT, serialize=SERIALIZE_DEPLOYS)


def get_registry() -> RepositoryRegistry:
    return registry


def get_script_runner() -> ScriptRunner:
    return runner
