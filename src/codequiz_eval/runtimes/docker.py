# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import shlex
from pathlib import Path
from typing import Any

import aiofiles
import anyio
import docker
from docker.errors import DockerException
from docker.models.containers import Container
from loguru import logger

from codequiz_eval.exceptions import SandboxError
from codequiz_eval.models import SandboxRequest, SandboxResult
from codequiz_eval.runtime import TIMEOUT_MESSAGE, SandboxExecutor

CPU_PERIOD = 100000
STDIN_SUFFIX = ".stdin"


class DockerSandbox(SandboxExecutor):
    """
    Docker-based implementation of the SandboxExecutor.

    Every execution gets a throw-away container with the staged code file and
    an input file bind-mounted read-only, no network, and hard memory, CPU and
    process limits. The container is force-removed afterwards.
    """

    def __init__(
        self,
        startup_grace_seconds: float = 15.0,
        cpu_period: int = CPU_PERIOD,
        pids_limit: int | None = 64,
        network_disabled: bool = True,
        client: docker.DockerClient | None = None,
    ):
        self.startup_grace_seconds = startup_grace_seconds
        self.cpu_period = cpu_period
        self.pids_limit = pids_limit
        self.network_disabled = network_disabled
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                logger.error(f"Cannot connect to Docker: {e}")
                raise SandboxError("Docker is not available") from e
        return self._client

    async def execute(self, request: SandboxRequest) -> SandboxResult:
        """
        Run the staged code file in a fresh container.
        """
        code_path = Path(request.code_file_path)
        input_path = code_path.with_name(code_path.stem + STDIN_SUFFIX)
        container_code_path = f"{request.container_work_dir}/{code_path.name}"
        container_input_path = f"{request.container_work_dir}/{input_path.name}"
        deadline = request.timeout_seconds + self.startup_grace_seconds

        container: Container | None = None
        try:
            # An empty file still gives the redirection something to read.
            try:
                async with aiofiles.open(input_path, "w") as f:
                    await f.write("\n".join(request.input))
            except OSError as e:
                logger.error(f"Failed to stage sandbox input: {e}")
                raise SandboxError(f"Failed to stage sandbox input: {e}") from e

            shell_command = " ".join(
                [request.command, *(shlex.quote(arg) for arg in request.arguments), "<", container_input_path]
            )
            container = await anyio.to_thread.run_sync(
                self._create_container,
                request,
                shell_command,
                {
                    str(code_path): {"bind": container_code_path, "mode": "ro"},
                    str(input_path): {"bind": container_input_path, "mode": "ro"},
                },
            )
            logger.info(f"Created sandbox container {container.short_id} for {code_path.name}")

            await anyio.to_thread.run_sync(container.start)

            with anyio.fail_after(deadline):
                exit_info: dict[str, Any] = await anyio.to_thread.run_sync(
                    container.wait, abandon_on_cancel=True
                )
            exit_code = exit_info.get("StatusCode", -1)

            stdout = await self._read_logs(container, stdout=True, stderr=False)
            stderr = await self._read_logs(container, stdout=False, stderr=True)

            if exit_code == 0:
                return SandboxResult(success=True, output=stdout)
            return SandboxResult(success=False, error=stderr or stdout)

        except TimeoutError:
            short_id = container.short_id if container else "unknown"
            logger.warning(f"Sandbox execution timed out after {deadline}s: {short_id}")
            return SandboxResult(success=False, error=TIMEOUT_MESSAGE, timed_out=True)
        except (DockerException, OSError) as e:
            logger.error(f"Sandbox execution failed: {e}")
            raise SandboxError(f"Sandbox execution failed: {e}") from e
        finally:
            if container is not None:
                await self._force_remove(container)
            try:
                input_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to delete sandbox input file {input_path}: {e}")

    def _create_container(
        self, request: SandboxRequest, shell_command: str, volumes: dict[str, dict[str, str]]
    ) -> Container:
        return self.client.containers.create(
            request.docker_image,
            command=["/bin/sh", "-c", shell_command],
            working_dir=request.container_work_dir,
            volumes=volumes,
            detach=True,
            tty=False,
            mem_limit=request.memory_limit_bytes,
            memswap_limit=request.memory_limit_bytes,
            cpu_period=self.cpu_period,
            cpu_quota=request.cpu_quota,
            pids_limit=self.pids_limit,
            network_disabled=self.network_disabled,
            security_opt=["no-new-privileges"],
        )

    @staticmethod
    async def _read_logs(container: Container, stdout: bool, stderr: bool) -> str:
        raw: bytes = await anyio.to_thread.run_sync(lambda: container.logs(stdout=stdout, stderr=stderr))
        return raw.decode("utf-8", errors="replace").strip()

    @staticmethod
    async def _force_remove(container: Container) -> None:
        # The container may already be gone; removal is best-effort.
        try:
            await anyio.to_thread.run_sync(lambda: container.remove(force=True))
        except Exception as e:
            logger.debug(f"Could not remove sandbox container {container.short_id}: {e}")
