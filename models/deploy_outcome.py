from pydantic import BaseModel
from typing import Optional


class DeployOutcome(BaseModel):
    success: bool
    output: bytes = b""
    exit_code: Optional[int] = None
    timed_out: bool = False
    error: Optional[str] = None

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")

    def describe(self) -> str:
        if self.error:
            return self.error
        return f"exit status {self.exit_code}"
