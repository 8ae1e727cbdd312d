# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from loguru import logger

from codequiz_eval.exceptions import CodeRunnerError
from codequiz_eval.factory import RunnerFactory
from codequiz_eval.models import CodeRunnerOptions, EvaluationResult, TestCase


class Evaluator:
    """Judges a solution against a single test case."""

    def __init__(self, factory: RunnerFactory):
        self.factory = factory

    async def evaluate(self, language: str, code: str, test_case: TestCase) -> EvaluationResult:
        """
        Run ``code`` in a sandbox with the test case's input and compare outputs.

        A runner failure counts as a failed test case rather than an error.

        Raises:
            UnsupportedLanguageError: If the language has no registered runner.
        """
        runner = self.factory.create(language)
        options = CodeRunnerOptions(contain_output=True, contain_error=True, input=test_case.input)

        try:
            result = await runner.run_code(code, options)
        except CodeRunnerError as e:
            logger.warning(f"Test case {test_case.test_case_number} could not be executed: {e}")
            return EvaluationResult(test_case=test_case, output="", is_successful=False, error=str(e))

        return EvaluationResult.judge(test_case, result)
