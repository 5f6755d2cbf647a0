import os
import signal
import unittest
from unittest import mock

from scanmon import main as scanmon_main
from scanmon.core.session import SessionSummary
from scanmon.errors import SetupError, UpdateFailure
from scanmon.models.scan import ScanOutcome, ScanStatus


class TestMain(unittest.TestCase):

    def setUp(self):
        for target in ('setup_logging', 'display_banner'):
            patcher = mock.patch.object(scanmon_main, target)
            patcher.start()
            self.addCleanup(patcher.stop)
        patcher = mock.patch('builtins.print')
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_version(self):
        self.assertEqual(scanmon_main.main(['--version']), 0)

    @mock.patch.object(scanmon_main, 'run_environment_checks', side_effect=SetupError("Unsupported operating system"))
    def test_setup_error_exits_1(self, _):
        self.assertEqual(scanmon_main.main(['/tmp']), 1)

    @mock.patch.object(scanmon_main, 'run_scan_session')
    @mock.patch.object(scanmon_main, 'run_environment_checks')
    def test_paths_skip_menu(self, _, run_scan_session):
        self.assertEqual(scanmon_main.main(['--update', 'no', '--timeout', '5', '/srv/a', '/srv/b']), 0)
        run_scan_session.assert_called_once_with(['/srv/a', '/srv/b'], 5.0)

    @mock.patch.object(scanmon_main, 'confirm', return_value=False)
    @mock.patch.object(scanmon_main, 'run_database_update', side_effect=UpdateFailure("exit 1", exit_code=1))
    @mock.patch.object(scanmon_main, 'run_scan_session')
    @mock.patch.object(scanmon_main, 'run_environment_checks')
    def test_declined_after_update_failure_exits_1(self, _, run_scan_session, update, confirm):
        self.assertEqual(scanmon_main.main(['--update', 'yes', '/srv/a']), 1)
        run_scan_session.assert_not_called()

    @mock.patch.object(scanmon_main, 'confirm', return_value=True)
    @mock.patch.object(scanmon_main, 'run_database_update', side_effect=UpdateFailure("exit 1", exit_code=1))
    @mock.patch.object(scanmon_main, 'run_scan_session')
    @mock.patch.object(scanmon_main, 'run_environment_checks')
    def test_continue_after_update_failure(self, _, run_scan_session, update, confirm):
        self.assertEqual(scanmon_main.main(['--update', 'yes', '/srv/a']), 0)
        run_scan_session.assert_called_once()

    @mock.patch.object(scanmon_main, 'run_environment_checks', side_effect=KeyboardInterrupt)
    def test_keyboard_interrupt_is_graceful(self, _):
        self.assertEqual(scanmon_main.main(['/tmp']), 0)


class TestRunScanSession(unittest.TestCase):

    @mock.patch('builtins.print')
    @mock.patch.object(scanmon_main, 'send_scan_summary_notification')
    @mock.patch.object(scanmon_main, 'print_summary')
    @mock.patch.object(scanmon_main, 'logger')
    @mock.patch.object(scanmon_main, 'ScanSession')
    def test_summary_is_logged_and_reported(self, session_class, logger, print_summary, notify, _):
        summary = SessionSummary()
        summary.add(ScanOutcome('/srv/a', ScanStatus.COMPLETED, 1.0, infected_count=2))
        session_class.return_value.run.return_value = summary

        self.assertIs(scanmon_main.run_scan_session(['/srv/a'], 5), summary)

        logged = [call.args[0] for call in logger.info.call_args_list]
        self.assertTrue(any("'total_infected': 2" in message for message in logged))
        print_summary.assert_called_once_with(summary)
        notify.assert_called_once_with(summary)

class TestInterruptHandler(unittest.TestCase):

    def test_signal_routed_and_restored(self):
        calls = []
        before = signal.getsignal(signal.SIGINT)
        with scanmon_main.interrupt_handler(lambda: calls.append('cancel')):
            os.kill(os.getpid(), signal.SIGINT)
        self.assertEqual(calls, ['cancel'])
        self.assertIs(signal.getsignal(signal.SIGINT), before)


if __name__ == '__main__':
    unittest.main()
