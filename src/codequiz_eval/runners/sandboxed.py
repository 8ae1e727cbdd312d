# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from uuid import uuid4

import aiofiles
from loguru import logger

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.exceptions import CodeRunnerError
from codequiz_eval.models import CodeRunnerOptions, CodeRunnerResult, SandboxRequest
from codequiz_eval.runners.base import CodeRunner
from codequiz_eval.runtime import TIMEOUT_MESSAGE, SandboxExecutor
from codequiz_eval.utils.audit import ExecutionAuditor


class SandboxedCodeRunner(CodeRunner):
    """
    Runs another runner's language inside a sandbox executor.

    The wrapped runner is only used when no sandbox configuration exists for
    its language, in which case execution falls back to it unchanged.
    """

    def __init__(
        self,
        inner: CodeRunner,
        executor: SandboxExecutor,
        config: EvaluationConfig,
        audit: ExecutionAuditor | None = None,
    ):
        self.inner = inner
        self.executor = executor
        self.config = config
        self.audit = audit or ExecutionAuditor(enabled=config.enable_audit_logging)

    @property
    def language(self) -> str:
        return self.inner.language

    @property
    def extension(self) -> str:
        return self.inner.extension

    async def run_code(self, code: str, options: CodeRunnerOptions | None = None) -> CodeRunnerResult:
        options = options or CodeRunnerOptions()

        lang_config = self.config.get_language_config(self.language)
        if lang_config is None:
            logger.warning(f"No sandbox config for {self.language}, falling back to unsandboxed runner")
            return await self.inner.run_code(code, options)

        file_name = f"{uuid4()}{lang_config.file_extension}"
        file_path = self.config.temp_code_path / file_name

        try:
            prepared_code = lang_config.prepare_code(code)
            self.audit.log_pre_execution(prepared_code, self.language)

            self.config.temp_code_path.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "w") as f:
                await f.write(prepared_code)

            result = await self.executor.execute(
                SandboxRequest(
                    docker_image=lang_config.docker_image,
                    command=lang_config.command,
                    arguments=lang_config.get_arguments(file_name),
                    code_file_path=str(file_path),
                    container_work_dir=self.config.container_work_dir,
                    input=options.input,
                    timeout_seconds=self.config.timeout_seconds,
                    memory_limit_bytes=self.config.memory_limit_bytes,
                    cpu_quota=self.config.cpu_quota,
                )
            )

            error = result.error or (TIMEOUT_MESSAGE if result.timed_out else None)
            return CodeRunnerResult(
                success=result.success,
                output=result.output if options.contain_output else None,
                error=error if options.contain_error else None,
            )

        except Exception as e:
            logger.error(f"Failed to execute {self.language} code in sandbox: {e}")
            raise CodeRunnerError(f"Failed to execute {self.language} code", language=self.language) from e
        finally:
            try:
                file_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Failed to delete temp file: {file_path}")
