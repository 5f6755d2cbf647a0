import unittest
from unittest import mock

import requests

from scanmon.core.session import SessionSummary
from scanmon.models.scan import ScanOutcome, ScanStatus
from scanmon.utils.webhooks import send_scan_summary_notification


def make_summary(infected):
    summary = SessionSummary()
    summary.add(ScanOutcome('/a', ScanStatus.COMPLETED, 2.0, infected_count=infected))
    return summary


class TestScanSummaryWebhook(unittest.TestCase):

    def test_no_url_configured(self):
        with mock.patch('scanmon.utils.webhooks.requests.post') as post:
            self.assertFalse(send_scan_summary_notification(make_summary(0), webhook_url=''))
            post.assert_not_called()

    @mock.patch('scanmon.utils.webhooks.requests.post')
    def test_posts_embed(self, post):
        post.return_value.raise_for_status.return_value = None
        self.assertTrue(send_scan_summary_notification(make_summary(3), webhook_url='https://example.invalid/hook'))

        payload = post.call_args.kwargs['json']
        embed = payload['embeds'][0]
        self.assertEqual(embed['title'], "Scan complete: infections found")
        self.assertEqual(embed['fields'][0]['value'], '3')

    @mock.patch('scanmon.utils.webhooks.requests.post')
    def test_http_error_is_reported(self, post):
        post.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        self.assertFalse(send_scan_summary_notification(make_summary(0), webhook_url='https://example.invalid/hook'))


if __name__ == '__main__':
    unittest.main()
