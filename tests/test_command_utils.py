import sys
import unittest
from unittest.mock import patch, MagicMock, mock_open
import subprocess

from logic.command_utils import (_safe_decode, _loggable_command, run_system_command,
                                 run_ps_command, run_external_ps_script, ps_quote)
from exceptions import CommandError

class TestSafeDecode(unittest.TestCase):
    """Tests for the _safe_decode utility function."""

    def test_decode_utf8(self):
        self.assertEqual(_safe_decode(b'hello'), 'hello')

    @unittest.skipUnless(sys.platform == 'win32', "The 'oem' codec only exists on Windows")
    def test_decode_oem(self):
        self.assertEqual(_safe_decode(b'\x84'), 'ä')

    @patch('logic.command_utils._decode_with_encoding')
    def test_decode_fallback_to_ascii_replace(self, mock_decode_with_encoding):
        """Test that the final ascii fallback is used if both utf-8 and oem fail."""
        mock_decode_with_encoding.side_effect = [
            UnicodeDecodeError('mock', b'', 0, 1, 'mock reason'), # Fails for 'utf-8'
            LookupError('unknown encoding: oem'),                 # No 'oem' codec
            '????'
        ]
        self.assertEqual(_safe_decode(b'\xde\xad\xbe\xef'), '????')

    def test_decode_none_or_empty(self):
        self.assertEqual(_safe_decode(None), '')
        self.assertEqual(_safe_decode(b''), '')

class TestLoggableCommand(unittest.TestCase):

    def test_key_argument_is_masked(self):
        command = ['netsh', 'wlan', 'set', 'hostednetwork', 'ssid=Home', 'key=supersecret']
        self.assertEqual(_loggable_command(command),
                         'netsh wlan set hostednetwork ssid=Home key=****')

    def test_encoded_command_is_shortened(self):
        command = ['powershell', '-EncodedCommand', 'longbase64string']
        self.assertEqual(_loggable_command(command), 'powershell -EncodedCommand <...>')

class TestRunSystemCommand(unittest.TestCase):
    """Tests for the run_system_command function."""

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_success(self, mock_popen):
        mock_process = MagicMock()
        mock_process.returncode = 0
        mock_process.communicate.return_value = (b'success output', b'')
        mock_popen.return_value.__enter__.return_value = mock_process

        result = run_system_command(["echo", "hello"], "Test success")

        self.assertEqual(result.returncode, 0)
        self.assertEqual(result.stdout, b'success output')

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_has_no_timeout_by_default(self, mock_popen):
        mock_process = MagicMock()
        mock_process.returncode = 0
        mock_process.communicate.return_value = (b'', b'')
        mock_popen.return_value.__enter__.return_value = mock_process

        run_system_command(["netsh", "wlan", "start", "hostednetwork"], "Test")

        mock_process.communicate.assert_called_once_with(timeout=None)

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_timeout(self, mock_popen):
        """Test that a TimeoutExpired exception is caught and wrapped."""
        mock_process = MagicMock()
        mock_process.communicate.side_effect = subprocess.TimeoutExpired(cmd="ping", timeout=10)
        mock_popen.return_value.__enter__.return_value = mock_process

        with self.assertRaisesRegex(CommandError, "The operation timed out"):
            run_system_command(["ping"], "Test ping", timeout=10)

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_file_not_found(self, mock_popen):
        mock_popen.side_effect = FileNotFoundError

        with self.assertRaisesRegex(CommandError, "Command 'nonexistent' not found"):
            run_system_command(["nonexistent"], "Test")

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_failure_with_stderr(self, mock_popen):
        mock_process = MagicMock()
        mock_process.returncode = 1
        mock_process.communicate.return_value = (b'some output', b'error details')
        mock_popen.return_value.__enter__.return_value = mock_process

        with self.assertRaises(CommandError) as cm:
            run_system_command(["failing_cmd"], "Test failure")

        self.assertIn("Test failure: error details", str(cm.exception))

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_failure_reports_stdout_when_stderr_is_empty(self, mock_popen):
        """netsh writes its failure text to stdout."""
        mock_process = MagicMock()
        mock_process.returncode = 1
        mock_process.communicate.return_value = (b'The hosted network couldn\'t be started.', b'')
        mock_popen.return_value.__enter__.return_value = mock_process

        with self.assertRaises(CommandError) as cm:
            run_system_command(["netsh"], "Start failed")

        self.assertIn("couldn't be started", str(cm.exception))

    @patch('logic.command_utils.subprocess.Popen')
    def test_command_failure_without_output(self, mock_popen):
        mock_process = MagicMock()
        mock_process.returncode = 1
        mock_process.communicate.return_value = (b'', b'')
        mock_popen.return_value.__enter__.return_value = mock_process

        with self.assertRaises(CommandError) as cm:
            run_system_command(["failing_cmd"], "Test failure")

        self.assertIn("An unknown error occurred.", str(cm.exception))

    @patch('logic.command_utils.subprocess.Popen')
    def test_failure_log_does_not_contain_key(self, mock_popen):
        mock_process = MagicMock()
        mock_process.returncode = 1
        mock_process.communicate.return_value = (b'', b'error')
        mock_popen.return_value.__enter__.return_value = mock_process

        with self.assertLogs('logic.command_utils', level='DEBUG') as cm, \
             self.assertRaises(CommandError):
            run_system_command(["netsh", "wlan", "set", "hostednetwork", "key=supersecret"], "Test failure")

        self.assertNotIn("supersecret", "\n".join(cm.output))
        self.assertIn("key=****", cm.output[0])

class TestRunPsCommand(unittest.TestCase):
    """Tests for PowerShell command runners."""

    @patch('logic.command_utils.run_system_command')
    def test_run_ps_command_success(self, mock_run_system):
        mock_run_system.return_value.stdout = b'Success'
        result = run_ps_command("Get-Process")
        self.assertEqual(result, "Success")
        self.assertIn("-EncodedCommand", mock_run_system.call_args[0][0])

    @patch('logic.command_utils.run_system_command', side_effect=CommandError("PS Error"))
    def test_run_ps_command_failure(self, mock_run_system):
        with self.assertRaisesRegex(CommandError, "PS Error"):
            run_ps_command("Get-Process")

    @patch('logic.command_utils.open', new_callable=mock_open, read_data='Get-Host')
    @patch('logic.command_utils.run_ps_command')
    def test_run_external_ps_script_success(self, mock_run_ps, mock_file):
        run_external_ps_script("test_script.ps1")
        mock_file.assert_called_once()
        mock_run_ps.assert_called_with('Get-Host')

    @patch('logic.command_utils.open', new_callable=mock_open, read_data='Get-Host')
    @patch('logic.command_utils.run_ps_command')
    def test_run_external_ps_script_with_variables(self, mock_run_ps, mock_file):
        """Variables are prepended as quoted assignments."""
        run_external_ps_script("test_script.ps1", ps_vars={'Guid': '{ABC}', 'Action': "it's"})
        mock_run_ps.assert_called_with("$Guid = '{ABC}'; $Action = 'it''s';\nGet-Host")

    @patch('logic.command_utils.open')
    def test_run_external_ps_script_file_not_found(self, mock_file):
        mock_file.side_effect = FileNotFoundError
        with self.assertRaisesRegex(CommandError, "PowerShell script 'test.ps1' not found"):
            run_external_ps_script("test.ps1")

    def test_ps_quote_doubles_single_quotes(self):
        self.assertEqual(ps_quote("O'Brien"), "'O''Brien'")

if __name__ == '__main__':
    unittest.main()
