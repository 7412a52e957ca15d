"""Run HandBrakeCLI."""

import subprocess
from typing import Sequence

from twopass.exceptions import TranscodeError
from twopass.utils.logger import get_logger

logger = get_logger(__name__)


class HandBrakeExecutor:
    """Execute a HandBrakeCLI argument list.

    The engine's own progress output goes straight to the terminal. An
    interrupt stops the child process and propagates to the caller so the
    whole batch ends.
    """

    def run(self, arguments: Sequence[str]) -> None:
        """Run the engine to completion.

        Args:
            arguments: Complete argument list, executable first

        Raises:
            TranscodeError: If the engine cannot be started or exits non-zero
        """
        logger.debug("Executing HandBrakeCLI", command=list(arguments))

        try:
            process = subprocess.Popen(list(arguments))
        except OSError as e:
            logger.error("HandBrakeCLI could not be started", executable=arguments[0], error=str(e))
            raise TranscodeError(f"cannot run {arguments[0]}: {e}") from e

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping HandBrakeCLI", pid=process.pid)
            process.terminate()
            try:
                process.wait(timeout=10)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
            raise

        if returncode != 0:
            logger.error("HandBrakeCLI failed", returncode=returncode)
            raise TranscodeError(f"transcoding failed with exit status {returncode}")

        logger.info("HandBrakeCLI finished")
