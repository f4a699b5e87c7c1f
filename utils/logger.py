"""
Logger utility for the OS Concepts Simulator.

Provides console and file logging with verbosity levels.
"""

from typing import Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation results and decisions.

    Format: "[FIFO] Step 4: Page 2 - FAULT (Page Fault - Replaced page 7 in frame 1)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"OS Simulator Log - {timestamp}\n")
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

        # Console output
        print(formatted)

        # File output
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

    def log_page_reference(
        self,
        strategy: str,
        step: int,
        page: int,
        fault: bool,
        action: str
    ) -> None:
        """
        Log one page reference (debug level).

        Args:
            strategy: Strategy name
            step: 1-based step number
            page: Page requested
            fault: Whether the reference faulted
            action: Action description
        """
        status = "FAULT" if fault else "HIT"
        self.log(f"[{strategy}] Step {step}: Page {page} - {status} ({action})", "debug")

    def log_dispatch(self, policy: str, pid: int, start: int, end: int) -> None:
        """Log one Gantt interval (debug level)."""
        self.log(f"[{policy}] t={start:>3}..{end:<3} P{pid} runs", "debug")

    def log_safety(self, safe: bool, sequence: str) -> None:
        """
        Log a Banker's safety verdict.

        Args:
            safe: Verdict
            sequence: Formatted sequence
        """
        if safe:
            self.log(f"SAFE - sequence: {sequence or '(no processes)'}")
        else:
            self.log(f"UNSAFE - finished before stall: {sequence or 'none'}", "warning")

    def log_request(self, pid: int, request: list, granted: bool, reason: str) -> None:
        """
        Log a resource request decision.

        Args:
            pid: Process index
            request: Amounts requested per resource type
            granted: Whether the request was granted
            reason: Reason for decision
        """
        status = "GRANTED" if granted else "DENIED"
        self.log(f"P{pid} requests {request} - {status} ({reason})")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
