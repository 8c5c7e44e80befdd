"""Order notifications.

Notifications are fire-and-forget: they run after the order write has
committed and a failure is logged, never raised to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Tuple, runtime_checkable

import httpx

from procflow.domain.orders.models import OrderInstance, utcnow

logger = logging.getLogger(__name__)

UNASSIGNED = "未分配"


class NotificationEvent(str, Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_ASSIGNED = "ORDER_ASSIGNED"
    ORDER_CLOSED = "ORDER_CLOSED"


@dataclass
class NotificationMessage:
    """One event rendered for mail (title/text) and chat robots (markdown)."""
    title: str
    text: str
    markdown: str


def compose_message(
    event: NotificationEvent,
    order: OrderInstance,
    target_actor: Optional[str] = None,
    now: Optional[datetime] = None,
) -> NotificationMessage:
    """Render the message for an event."""
    timestamp = (now or utcnow()).strftime("%Y-%m-%d %H:%M:%S")
    sn = order.machine_sn

    if event == NotificationEvent.ORDER_CREATED:
        handler = target_actor or UNASSIGNED
        title = f"🆕 新工单提醒: {order.order_number}"
        text = (
            f"收到新的维修工单。\nSN: {sn}\n客户: {order.customer_name}\n"
            f"故障: {order.fault_description}\n默认处理人: {handler}"
        )
        markdown = (
            f"## {title}\n> **SN:** <font color=\"info\">{sn}</font>\n"
            f"> **客户:** {order.customer_name}\n> **故障:** {order.fault_description}\n"
            f"> **默认处理人:** {handler}"
        )
    elif event == NotificationEvent.ORDER_ASSIGNED:
        title = f"👉 工单指派: {order.order_number}"
        text = f"工单已指派给您。\nSN: {sn}\n当前状态: {order.status}\n操作时间: {timestamp}"
        markdown = (
            f"## {title}\n> **SN:** <font color=\"info\">{sn}</font>\n"
            f"> **状态:** {order.status}\n> **处理人:** @{target_actor or UNASSIGNED}\n"
            f"> **时间:** {timestamp}"
        )
    else:
        title = f"✅ 工单结单: {order.order_number}"
        text = f"工单已完成处理并关闭。\nSN: {sn}\n最终状态: {order.status}"
        markdown = (
            f"## {title}\n> **SN:** <font color=\"info\">{sn}</font>\n"
            f"> **状态:** <font color=\"green\">{order.status}</font>\n> **处理完成**"
        )

    return NotificationMessage(title=title, text=text, markdown=markdown)


@runtime_checkable
class Notifier(Protocol):
    """Notification collaborator."""

    async def notify(
        self,
        event: NotificationEvent,
        order: OrderInstance,
        target_actor: Optional[str] = None,
    ) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log. Default when no channel is configured."""

    async def notify(
        self,
        event: NotificationEvent,
        order: OrderInstance,
        target_actor: Optional[str] = None,
    ) -> None:
        message = compose_message(event, order, target_actor)
        logger.info(f"[{event.value}] {message.title} -> {target_actor or UNASSIGNED}")


class WebhookNotifier:
    """Posts notifications to chat robot webhooks (WeCom, DingTalk, Feishu)."""

    def __init__(
        self,
        wecom_webhook: Optional[str] = None,
        dingtalk_webhook: Optional[str] = None,
        feishu_webhook: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.wecom_webhook = wecom_webhook
        self.dingtalk_webhook = dingtalk_webhook
        self.feishu_webhook = feishu_webhook
        self.timeout = timeout
        self.transport = transport

    def payloads(self, message: NotificationMessage) -> List[Tuple[str, dict]]:
        """(url, json body) pairs for each configured robot."""
        calls = []
        if self.wecom_webhook:
            calls.append((self.wecom_webhook, {
                "msgtype": "markdown",
                "markdown": {"content": message.markdown},
            }))
        if self.dingtalk_webhook:
            calls.append((self.dingtalk_webhook, {
                "msgtype": "markdown",
                "markdown": {"title": message.title, "text": message.markdown},
            }))
        if self.feishu_webhook:
            calls.append((self.feishu_webhook, {
                "msg_type": "text",
                "content": {"text": f"{message.title}\n{message.text}"},
            }))
        return calls

    async def notify(
        self,
        event: NotificationEvent,
        order: OrderInstance,
        target_actor: Optional[str] = None,
    ) -> None:
        message = compose_message(event, order, target_actor)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for url, body in self.payloads(message):
                response = await client.post(url, json=body)
                response.raise_for_status()
        logger.debug(f"Posted {event.value} for order {order.id}")


async def notify_safely(
    notifier: Optional[Notifier],
    event: NotificationEvent,
    order: OrderInstance,
    target_actor: Optional[str] = None,
) -> bool:
    """Deliver a notification, swallowing failures.

    Returns True if delivered.
    """
    if notifier is None:
        return False
    try:
        await notifier.notify(event, order, target_actor)
        return True
    except Exception:
        logger.exception(f"Notification {event.value} failed for order {order.id}")
        return False

