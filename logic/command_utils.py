import subprocess
import logging
import base64
import os
import re

from exceptions import CommandError

logger = logging.getLogger(__name__)

# Only defined on Windows; keeps the module importable elsewhere.
CREATE_NO_WINDOW = getattr(subprocess, 'CREATE_NO_WINDOW', 0)

_SECRET_ARG_PATTERN = re.compile(r'^(key=).*$', re.IGNORECASE)

def _decode_with_encoding(byte_string: bytes, encoding: str, errors: str = 'strict') -> str:
    """Wrapper for bytes.decode to make it patchable for tests."""
    return byte_string.decode(encoding, errors=errors)

def _safe_decode(byte_string: bytes | None) -> str:
    """Safely decodes a byte string using common encodings."""
    if not byte_string:
        return ""
    try:
        return _decode_with_encoding(byte_string, 'utf-8').strip()
    except UnicodeDecodeError:
        try:
            return _decode_with_encoding(byte_string, 'oem').strip()
        except (UnicodeDecodeError, LookupError):
            # The 'oem' codec only exists on Windows.
            return _decode_with_encoding(byte_string, 'ascii', errors='replace').strip().replace('\ufffd', '?')

def _loggable_command(command: list[str]) -> str:
    """Renders a command for the log with encoded scripts and keys hidden."""
    if "-EncodedCommand" in command:
        return " ".join(command[:command.index("-EncodedCommand") + 1]) + " <...>"
    return " ".join(_SECRET_ARG_PATTERN.sub(r'\1****', part) for part in command)

def run_system_command(command: list[str], error_message_prefix: str,
                       check: bool = True, cwd: str | None = None, timeout: int | None = None):
    """
    A helper function to run a system command and handle errors consistently.
    No timeout is applied unless the caller asks for one.
    Raises CommandError on failure.
    """
    log_command = _loggable_command(command)
    logger.debug("Executing system command: %s", log_command)
    try:
        # Capture raw bytes and decode manually; netsh output follows the OEM code page.
        with subprocess.Popen(
            command,
            shell=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            creationflags=CREATE_NO_WINDOW,
            cwd=cwd
        ) as process:
            stdout_bytes, stderr_bytes = process.communicate(timeout=timeout)
            if check and process.returncode != 0:
                raise subprocess.CalledProcessError(process.returncode, command, output=stdout_bytes, stderr=stderr_bytes)
            return subprocess.CompletedProcess(command, process.returncode, stdout_bytes, stderr_bytes)
    except subprocess.CalledProcessError as e:
        stdout = _safe_decode(e.stdout)
        stderr = _safe_decode(e.stderr)

        log_message = (
            f"{error_message_prefix}\n\n"
            f"Command: {log_command}\n"
            f"Return Code: {e.returncode}\n"
            f"Stderr: {stderr}\n"
            f"Stdout: {stdout}"
        )
        logger.error("System command failed: %s", log_message)
        # Prefer stderr for the operator, netsh reports most failures on stdout.
        user_error_message = stderr or stdout or "An unknown error occurred."
        raise CommandError(f"{error_message_prefix}: {user_error_message}") from e
    except subprocess.TimeoutExpired as e:
        logger.error("System command timed out: %s", log_command)
        raise CommandError(
            f"The operation timed out after {timeout} seconds: {log_command}") from e
    except FileNotFoundError as e:
        raise CommandError(
            f"Command '{command[0]}' not found. Is it in the system's PATH?") from e

def decode_output(result: subprocess.CompletedProcess) -> str:
    """Returns the decoded stdout of a finished command."""
    return _safe_decode(result.stdout)

def ps_quote(value: str) -> str:
    """Quotes a value as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"

def run_ps_command(script: str) -> str:
    """
    Runs a PowerShell script safely using -EncodedCommand.

    Raises CommandError on failure.
    """
    logger.debug("Executing PowerShell script.")
    encoded_script = base64.b64encode(script.encode('utf-16-le')).decode('ascii')
    command = ['powershell', '-NoProfile', '-ExecutionPolicy', 'Bypass', '-EncodedCommand', encoded_script]
    result = run_system_command(command, "PowerShell script execution failed.")
    return result.stdout.decode('utf-8', errors='ignore')

def run_external_ps_script(script_name: str, ps_vars: dict[str, str] | None = None) -> str:
    """
    Reads and executes a PowerShell script shipped in the 'logic' directory.

    Entries of ps_vars are prepended as quoted variable assignments, which is
    how values reach a script passed with -EncodedCommand.
    """
    try:
        script_dir = os.path.dirname(__file__)
        script_path = os.path.join(script_dir, script_name)

        with open(script_path, 'r', encoding='utf-8') as f:
            ps_script = f.read()

        if ps_vars:
            assignments = "; ".join(f"${name} = {ps_quote(value)}" for name, value in ps_vars.items())
            ps_script = f"{assignments};\n{ps_script}"

        return run_ps_command(ps_script)
    except FileNotFoundError as e:
        raise CommandError(
            f"PowerShell script '{script_name}' not found: {e}") from e
