# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from collections.abc import Callable, Iterable

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.exceptions import UnsupportedLanguageError
from codequiz_eval.models import SupportedLanguage
from codequiz_eval.runners import CodeRunner, SandboxedCodeRunner, build_runners
from codequiz_eval.runtime import SandboxExecutor
from codequiz_eval.runtimes.docker import DockerSandbox
from codequiz_eval.utils.audit import ExecutionAuditor

SandboxWrapper = Callable[[CodeRunner], CodeRunner]


class RunnerFactory:
    """
    Factory to resolve a CodeRunner by language name.

    Registered runners are keyed by their lower-cased language. Requests for
    a sandboxed runner get the registered runner wrapped by ``sandbox_wrapper``.
    """

    def __init__(self, runners: Iterable[CodeRunner], sandbox_wrapper: SandboxWrapper):
        self._runners: dict[str, CodeRunner] = {runner.language.lower(): runner for runner in runners}
        self._sandbox_wrapper = sandbox_wrapper

    def create(self, language: str, sandbox: bool = True) -> CodeRunner:
        """
        Returns the runner for ``language``, sandboxed unless told otherwise.

        Raises:
            UnsupportedLanguageError: If no runner is registered for the language.
        """
        runner = self._runners.get(language.lower())
        if runner is None:
            raise UnsupportedLanguageError(language)
        return self._sandbox_wrapper(runner) if sandbox else runner

    def get_supported_languages(self) -> list[SupportedLanguage]:
        return [SupportedLanguage(name=r.language, extension=r.extension) for r in self._runners.values()]


def get_runner_factory(config: EvaluationConfig, executor: SandboxExecutor | None = None) -> RunnerFactory:
    """
    Builds the default factory: every registered runner, sandboxed in Docker.
    """
    if executor is None:
        executor = DockerSandbox(
            startup_grace_seconds=config.startup_grace_seconds,
            cpu_period=config.cpu_period,
            pids_limit=config.pids_limit,
            network_disabled=config.network_disabled,
        )
    audit = ExecutionAuditor(enabled=config.enable_audit_logging)

    def wrap(runner: CodeRunner) -> CodeRunner:
        return SandboxedCodeRunner(runner, executor, config, audit=audit)

    return RunnerFactory(build_runners(config), wrap)
