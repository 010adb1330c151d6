"""Build driver: run the toolchain for one build job."""

import threading
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path

from kiln.config.models import CacheStrategy, ProjectConfig, ToolchainProfile
from kiln.core.errors import BuildError, ConfigurationError
from kiln.core.structlog_logger import StructlogMixin
from kiln.matrix.models import BuildJob, JobState
from kiln.protocols import CommandRunnerProtocol
from kiln.utils.stream_process import (
    LoggerOutputMiddleware,
    format_diagnostic,
    run_command,
)


def substitute(arg: str, values: dict[str, str]) -> str:
    """Replace ``{name}`` placeholders, leaving other braces untouched."""
    for key, value in values.items():
        arg = arg.replace("{" + key + "}", value)
    return arg


class BuildDriver(StructlogMixin):
    """Invoke the toolchain for a single build job.

    The composed feature set is passed to the toolchain exactly as computed;
    nothing is added or removed. Failures are not retried and nothing is
    cleaned up.

    Parallel builds need an explicit cache policy. With
    ``CacheStrategy.ISOLATED`` each target gets its own build cache directory
    through the profile's ``cache_env`` variable. With ``CacheStrategy.SHARED``
    builds that use the same toolchain working directory hold a lock.
    """

    service_name = "build_driver"

    def __init__(
        self,
        config: ProjectConfig,
        project_root: Path,
        cache_strategy: CacheStrategy = CacheStrategy.ISOLATED,
        runner: CommandRunnerProtocol | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.project_root = project_root
        self.cache_strategy = CacheStrategy(cache_strategy)
        self.runner = runner or run_command
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def profile_for(self, job: BuildJob) -> ToolchainProfile:
        profile = self.config.toolchains.get(job.target.toolchain)
        if profile is None:
            raise ConfigurationError(
                f"Unknown toolchain '{job.target.toolchain}'",
                {"target": job.target.id, "variant": job.variant.id},
            )
        return profile

    def target_dir_for(self, job: BuildJob, profile: ToolchainProfile) -> str:
        if self.cache_strategy == CacheStrategy.ISOLATED:
            return f"{profile.target_dir}/kiln-{job.target.id}"
        return profile.target_dir

    def placeholders(self, job: BuildJob, profile: ToolchainProfile) -> dict[str, str]:
        return {
            "features": job.features.render(profile.feature_separator),
            "target": job.target.id,
            "variant": job.variant.id,
            "target_dir": self.target_dir_for(job, profile),
        }

    def environment_for(
        self, job: BuildJob, profile: ToolchainProfile, working_dir: Path
    ) -> dict[str, str]:
        values = self.placeholders(job, profile)
        env = {key: substitute(value, values) for key, value in profile.env.items()}
        if self.cache_strategy == CacheStrategy.ISOLATED and profile.cache_env:
            env[profile.cache_env] = str(working_dir / values["target_dir"])
        return env

    def commands_for(self, job: BuildJob) -> list[list[str]]:
        """Every command the driver runs for ``job``, in order."""
        profile = self.profile_for(job)
        values = self.placeholders(job, profile)
        commands = [[substitute(arg, values) for arg in profile.command]]
        commands.extend(
            [substitute(arg, values) for arg in step] for step in profile.post_process
        )
        return commands

    def output_path_for(self, job: BuildJob) -> Path:
        profile = self.profile_for(job)
        working_dir = self.project_root / profile.working_dir
        return working_dir / substitute(profile.output, self.placeholders(job, profile))

    def build(self, job: BuildJob) -> Path:
        """Build ``job`` and return the raw output path.

        Raises:
            BuildError: If any toolchain command fails or no output appears
        """
        profile = self.profile_for(job)
        working_dir = self.project_root / profile.working_dir
        env = self.environment_for(job, profile, working_dir)
        commands = self.commands_for(job)
        output = self.output_path_for(job)
        log = self.log_operation("build", target=job.target.id, variant=job.variant.id)

        job.transition(JobState.RUNNING)
        log.info("build_started", features=list(job.features), cache=self.cache_strategy.value)
        try:
            with self._lock_for(working_dir):
                for cmd in commands:
                    self._run(job, cmd, working_dir, env)

            if not output.is_file():
                raise BuildError(
                    job.target.id,
                    job.variant.id,
                    f"Toolchain finished but produced no output at {output}",
                    command=commands[-1],
                )
        except BaseException:
            job.transition(JobState.FAILED)
            log.error("build_failed")
            raise

        job.transition(JobState.SUCCEEDED)
        log.info("build_succeeded", output=str(output))
        return output

    def _run(
        self, job: BuildJob, cmd: list[str], working_dir: Path, env: dict[str, str]
    ) -> None:
        middleware = LoggerOutputMiddleware(
            self.logger.bind(target=job.target.id, variant=job.variant.id)
        )
        try:
            return_code, stdout, stderr = self.runner(
                cmd, middleware, cwd=working_dir, env=env
            )
        except OSError as e:
            raise BuildError(
                job.target.id,
                job.variant.id,
                f"Cannot run toolchain: {e}",
                command=cmd,
            ) from e

        if return_code != 0:
            raise BuildError(
                job.target.id,
                job.variant.id,
                format_diagnostic(stdout, stderr),
                return_code=return_code,
                command=cmd,
            )

    def _lock_for(self, working_dir: Path) -> AbstractContextManager[object]:
        if self.cache_strategy != CacheStrategy.SHARED:
            return nullcontext()
        with self._locks_guard:
            return self._locks.setdefault(working_dir, threading.Lock())
