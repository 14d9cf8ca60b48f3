# goldwatch/services/notifier.py

"""Telegram delivery of text messages and chart images."""

import logging
from pathlib import Path
from typing import Any

from curl_cffi import CurlMime
from curl_cffi import requests as curl_requests
from rich.console import Console

from goldwatch.config.settings import Settings
from goldwatch.errors import ConfigurationError, DeliveryFailure

logger = logging.getLogger("goldwatch.notifier")


class TelegramNotifier:
    """Sends messages through the Telegram Bot API."""

    def __init__(
        self,
        token: str | None = None,
        chat_id: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.token = token if token is not None else Settings.TELEGRAM_BOT_TOKEN
        self.chat_id = str(
            chat_id if chat_id is not None else Settings.TELEGRAM_CHAT_ID
        )
        if not self.token or not self.chat_id:
            raise ConfigurationError(
                "TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set"
            )
        self.timeout = timeout or Settings.TELEGRAM_TIMEOUT
        self.base_url = f"{Settings.TELEGRAM_API_BASE}/bot{self.token}"
        self.session = curl_requests.Session()

    def _check(self, method: str, resp: curl_requests.Response) -> None:
        """Raise DeliveryFailure unless Telegram answered ``ok``."""
        if resp.status_code != 200:
            raise DeliveryFailure(
                f"Telegram {method} returned HTTP {resp.status_code}: "
                f"{resp.text[:200]}"
            )
        try:
            body: Any = resp.json()
        except ValueError as exc:
            raise DeliveryFailure(
                f"Telegram {method} returned a non-JSON body"
            ) from exc
        if not isinstance(body, dict) or not body.get("ok"):
            raise DeliveryFailure(
                f"Telegram {method} rejected the request: {body}"
            )

    def send_text(self, message: str) -> None:
        """Send a plain text message."""
        try:
            resp = self.session.post(
                f"{self.base_url}/sendMessage",
                json={"chat_id": self.chat_id, "text": message},
                timeout=self.timeout,
            )
        except Exception as exc:
            raise DeliveryFailure(f"sendMessage failed: {exc}") from exc
        self._check("sendMessage", resp)
        logger.info("Sent text message (%d chars)", len(message))

    def send_image(self, image: bytes, caption: str) -> None:
        """Upload a PNG with a caption."""
        mp = CurlMime()
        try:
            mp.addpart(name="chat_id", data=self.chat_id.encode())
            mp.addpart(name="caption", data=caption.encode("utf-8"))
            mp.addpart(
                name="photo",
                content_type="image/png",
                filename="chart.png",
                data=image,
            )
            try:
                resp = self.session.post(
                    f"{self.base_url}/sendPhoto",
                    multipart=mp,
                    timeout=self.timeout,
                )
            except Exception as exc:
                raise DeliveryFailure(f"sendPhoto failed: {exc}") from exc
        finally:
            mp.close()
        self._check("sendPhoto", resp)
        logger.info("Sent chart image (%d bytes)", len(image))


class DryRunNotifier:
    """Prints messages and saves images instead of sending them."""

    def __init__(
        self,
        output_dir: Path | None = None,
        console: Console | None = None,
    ) -> None:
        self.output_dir = output_dir or Settings.DATA_DIR
        self.console = console or Console(stderr=True)
        self.sent_texts: list[str] = []
        self.sent_images: list[Path] = []

    def send_text(self, message: str) -> None:
        self.console.print(f"[bold cyan]Would send:[/bold cyan]\n{message}")
        self.sent_texts.append(message)

    def send_image(self, image: bytes, caption: str) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / "chart.png"
        path.write_bytes(image)
        self.console.print(
            f"[bold cyan]Would send image:[/bold cyan] {caption} "
            f"[dim]({path})[/dim]"
        )
        self.sent_images.append(path)
