# tests/test_notifier.py

"""Tests for Telegram delivery."""

import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from rich.console import Console

from goldwatch.errors import ConfigurationError, DeliveryFailure
from goldwatch.services.notifier import DryRunNotifier, TelegramNotifier


def _response(status: int = 200, body: object = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = str(body)
    resp.json.return_value = {"ok": True} if body is None else body
    return resp


class TestTelegramConfig(unittest.TestCase):
    """Credential validation."""

    def test_missing_token_raises(self) -> None:
        """A notifier without a token cannot be built."""
        with self.assertRaises(ConfigurationError):
            TelegramNotifier(token="", chat_id="123")

    def test_missing_chat_raises(self) -> None:
        """A notifier without a chat id cannot be built."""
        with self.assertRaises(ConfigurationError):
            TelegramNotifier(token="abc", chat_id="")


@patch("goldwatch.services.notifier.curl_requests.Session")
class TestSendText(unittest.TestCase):
    """sendMessage calls."""

    def test_posts_message(self, mock_session_cls: MagicMock) -> None:
        """Text goes to sendMessage with the chat id."""
        session = mock_session_cls.return_value
        session.post.return_value = _response()

        notifier = TelegramNotifier(token="TOKEN", chat_id="42")
        notifier.send_text("xin chào")

        args, kwargs = session.post.call_args
        self.assertEqual(
            args[0], "https://api.telegram.org/botTOKEN/sendMessage",
        )
        self.assertEqual(kwargs["json"], {"chat_id": "42", "text": "xin chào"})
        self.assertIn("timeout", kwargs)

    def test_http_error_raises(self, mock_session_cls: MagicMock) -> None:
        """Non-200 responses are delivery failures."""
        mock_session_cls.return_value.post.return_value = _response(
            status=401, body={"ok": False},
        )
        notifier = TelegramNotifier(token="T", chat_id="1")
        with self.assertRaisesRegex(DeliveryFailure, "HTTP 401"):
            notifier.send_text("x")

    def test_not_ok_body_raises(self, mock_session_cls: MagicMock) -> None:
        """A 200 with ok=false is still a failure."""
        mock_session_cls.return_value.post.return_value = _response(
            body={"ok": False, "description": "chat not found"},
        )
        notifier = TelegramNotifier(token="T", chat_id="1")
        with self.assertRaises(DeliveryFailure):
            notifier.send_text("x")

    def test_non_json_body_raises(self, mock_session_cls: MagicMock) -> None:
        """An unparseable body is a failure."""
        resp = _response()
        resp.json.side_effect = ValueError("no json")
        mock_session_cls.return_value.post.return_value = resp
        notifier = TelegramNotifier(token="T", chat_id="1")
        with self.assertRaises(DeliveryFailure):
            notifier.send_text("x")

    def test_transport_error_raises(self, mock_session_cls: MagicMock) -> None:
        """Network errors are wrapped in DeliveryFailure."""
        mock_session_cls.return_value.post.side_effect = OSError("reset")
        notifier = TelegramNotifier(token="T", chat_id="1")
        with self.assertRaises(DeliveryFailure):
            notifier.send_text("x")


@patch("goldwatch.services.notifier.CurlMime")
@patch("goldwatch.services.notifier.curl_requests.Session")
class TestSendImage(unittest.TestCase):
    """sendPhoto multipart uploads."""

    def test_uploads_photo(
        self, mock_session_cls: MagicMock, mock_mime_cls: MagicMock,
    ) -> None:
        """The PNG, chat id and caption are sent as multipart parts."""
        session = mock_session_cls.return_value
        session.post.return_value = _response()
        mime = mock_mime_cls.return_value

        notifier = TelegramNotifier(token="TOKEN", chat_id="42")
        notifier.send_image(b"\x89PNG", "📊 chart")

        args, kwargs = session.post.call_args
        self.assertEqual(
            args[0], "https://api.telegram.org/botTOKEN/sendPhoto",
        )
        self.assertIs(kwargs["multipart"], mime)
        names = [c.kwargs["name"] for c in mime.addpart.call_args_list]
        self.assertEqual(names, ["chat_id", "caption", "photo"])
        photo = mime.addpart.call_args_list[2].kwargs
        self.assertEqual(photo["data"], b"\x89PNG")
        self.assertEqual(photo["content_type"], "image/png")
        mime.close.assert_called_once()

    def test_failure_still_closes_mime(
        self, mock_session_cls: MagicMock, mock_mime_cls: MagicMock,
    ) -> None:
        """The multipart handle is released on error."""
        mock_session_cls.return_value.post.side_effect = OSError("reset")
        notifier = TelegramNotifier(token="T", chat_id="1")
        with self.assertRaises(DeliveryFailure):
            notifier.send_image(b"png", "c")
        mock_mime_cls.return_value.close.assert_called_once()


class TestDryRunNotifier(unittest.TestCase):
    """The dry-run notifier records instead of sending."""

    def test_records_text_and_image(self) -> None:
        """Messages are kept and images written to disk."""
        with tempfile.TemporaryDirectory() as tmp:
            notifier = DryRunNotifier(
                output_dir=Path(tmp),
                console=Console(file=io.StringIO()),
            )
            notifier.send_text("hello")
            notifier.send_image(b"png-bytes", "caption")
            self.assertEqual(notifier.sent_texts, ["hello"])
            self.assertEqual(
                notifier.sent_images[0].read_bytes(), b"png-bytes",
            )


if __name__ == "__main__":
    unittest.main()
