"""
Logger utility for the OS Resource Simulator.

Provides step-by-step logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation events and decisions.

    Format: "Step X: <message>"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None, quiet: bool = False):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            quiet: Suppress console output (file output is unaffected)
        """
        self.verbose = verbose
        self.quiet = quiet
        self.log_file = log_file
        self.file_handle = None
        self.lines: List[str] = []

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)
        self.lines.append(formatted)

        if not self.quiet:
            print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, step: int, message: str, level: str = "info") -> None:
        """Log a simulation step message."""
        self.log(f"Step {step}: {message}", level)

    def log_tick(self, time: int, process_name: Optional[str], note: str = "") -> None:
        """
        Log one scheduling time unit (debug level).

        Args:
            time: Time unit
            process_name: Running process, None when idle
            note: Extra detail (dispatch, completion)
        """
        running = process_name if process_name else "IDLE"
        message = f"t={time:3} RUN {running}"
        if note:
            message += f" ({note})"
        self.log(message, "debug")

    def log_request(
        self,
        step: int,
        process_name: str,
        resource_name: str,
        amount: int,
        granted: bool,
        reason: str = ""
    ) -> None:
        """
        Log a resource request.

        Args:
            step: Current step
            process_name: Requesting process
            resource_name: Requested resource
            amount: Amount requested
            granted: Whether request was granted
            reason: Reason for decision
        """
        status = "ACQUIRED" if granted else "WAITING FOR"
        message = f"{process_name} {status} {amount} INSTANCE(S) OF {resource_name}"
        if reason:
            message += f" ({reason})"
        self.log_step(step, message)

    def log_deadlock(self, step: int, deadlocked: list) -> None:
        """
        Log deadlock detection.

        Args:
            step: Current step
            deadlocked: Names or PIDs on the circular wait
        """
        names = " -> ".join(str(p) for p in deadlocked)
        self.log_step(step, f"DEADLOCK DETECTED - CIRCULAR WAIT: [{names}]", "warning")

    def log_safety(self, step: int, safe: bool, sequence: list) -> None:
        """Log the outcome of a Banker's safety check."""
        if safe:
            order = " -> ".join(str(p) for p in sequence)
            self.log_step(step, f"BANKER'S ALGORITHM: SAFE SEQUENCE FOUND: {order}")
        else:
            self.log_step(step, "BANKER'S ALGORITHM: UNSAFE STATE DETECTED - no safe sequence",
                          "warning")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
