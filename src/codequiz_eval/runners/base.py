# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from uuid import uuid4

import aiofiles
from loguru import logger

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.exceptions import CodeRunnerError
from codequiz_eval.models import CodeRunnerOptions, CodeRunnerResult
from codequiz_eval.runtime import TIMEOUT_MESSAGE


class CodeRunner(ABC):
    """
    Abstract base class for language runners.

    A runner declares the language it executes and the source file extension
    it stages code under.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Language identifier, e.g. ``python``."""
        pass  # pragma: no cover

    @property
    @abstractmethod
    def extension(self) -> str:
        """Source file extension including the dot, e.g. ``.py``."""
        pass  # pragma: no cover

    @abstractmethod
    async def run_code(self, code: str, options: CodeRunnerOptions | None = None) -> CodeRunnerResult:
        """Execute code and capture its output.

        Args:
            code: The source code to execute.
            options: Input lines and capture flags. Defaults are used if omitted.

        Returns:
            CodeRunnerResult: Success flag plus captured output or error.

        Raises:
            CodeRunnerError: If the code could not be executed at all.
        """
        pass  # pragma: no cover


class ProcessCodeRunner(CodeRunner):
    """Runs code in a local child process, without isolation.

    Subclasses provide the command line and the convention for which stream
    carries errors.
    """

    def __init__(self, code_files_path: Path, timeout_seconds: float | None = None):
        self.code_files_path = Path(code_files_path)
        self.timeout_seconds = timeout_seconds

    @classmethod
    @abstractmethod
    def from_config(cls, config: EvaluationConfig) -> "ProcessCodeRunner":
        """Build the runner from service configuration."""
        pass  # pragma: no cover

    @abstractmethod
    def build_command(self, file_path: Path) -> list[str]:
        pass  # pragma: no cover

    def prepare_code(self, code: str) -> str:
        return code

    def select_error(self, stdout: str, stderr: str) -> str:
        return stderr

    async def run_code(self, code: str, options: CodeRunnerOptions | None = None) -> CodeRunnerResult:
        options = options or CodeRunnerOptions()
        file_path = self.code_files_path / f"{uuid4()}{self.extension}"

        try:
            self.code_files_path.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "w") as f:
                await f.write(self.prepare_code(code))

            process = await asyncio.create_subprocess_exec(
                *self.build_command(file_path),
                cwd=self.code_files_path,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdin_data = "".join(f"{line}\n" for line in options.input).encode("utf-8")

            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(
                    process.communicate(stdin_data), timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                logger.warning(f"{self.language} process exceeded {self.timeout_seconds}s. Killing it.")
                return CodeRunnerResult(success=False, error=TIMEOUT_MESSAGE if options.contain_error else None)
            finally:
                # Covers timeouts and cancellation alike.
                if process.returncode is None:
                    await self._kill(process)

            stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
            stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

            if process.returncode == 0:
                return CodeRunnerResult(success=True, output=stdout if options.contain_output else None)
            return CodeRunnerResult(
                success=False,
                error=self.select_error(stdout, stderr) if options.contain_error else None,
            )

        except Exception as e:
            logger.error(f"Failed to execute {self.language} code: {e}")
            raise CodeRunnerError(f"Unable to execute {self.language} code", language=self.language) from e
        finally:
            try:
                file_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Failed to delete temporary code file: {file_path}")

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
        logger.info(f"Killed {self.language} process {process.pid}")
