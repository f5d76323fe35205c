"""Web-push delivery, due-date reminders and task status updates."""
import json
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from ..config import VAPID_CLAIM_EMAIL, VAPID_PRIVATE_KEY
from ..models import Project, PushSubscription, Task, TaskStatus

logger = logging.getLogger(__name__)

PushSender = Callable[[PushSubscription, dict], bool]


def send_push_notification(subscription: PushSubscription, payload: dict) -> bool:
    """Deliver one payload; returns False when the push service rejects it."""
    try:
        webpush(
            subscription_info=subscription.as_subscription_info(),
            data=json.dumps(payload),
            vapid_private_key=VAPID_PRIVATE_KEY,
            vapid_claims={"sub": VAPID_CLAIM_EMAIL},
        )
    except WebPushException as exc:
        if exc.response is not None and exc.response.status_code == 410:
            logger.info("Subscription %s is expired or no longer valid", subscription.endpoint)
        else:
            logger.error("Error sending push notification: %s", exc)
        return False

    logger.debug("Push notification sent to %s", subscription.endpoint)
    return True


def get_push_sender() -> PushSender:
    """Dependency returning the delivery function; overridden in tests."""
    return send_push_notification


def subscribe(db: Session, endpoint: str, p256dh: str, auth: str, user_id: str = None) -> PushSubscription:
    """Store a subscription, replacing the keys of a known endpoint."""
    subscription = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
    if subscription is None:
        subscription = PushSubscription(endpoint=endpoint, p256dh=p256dh, auth=auth, user_id=user_id)
        db.add(subscription)
    else:
        subscription.p256dh = p256dh
        subscription.auth = auth
        if user_id is not None:
            subscription.user_id = user_id
    db.commit()
    db.refresh(subscription)
    return subscription


def due_today(db: Session, today: date) -> List[Task]:
    """Open, assigned tasks whose due date falls on ``today``."""
    start = datetime.combine(today, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1)
    return (
        db.query(Task)
        .filter(
            Task.due_date >= start,
            Task.due_date < end,
            Task.is_completed.is_(False),
            Task.assigned_to.isnot(None),
        )
        .order_by(Task.due_date)
        .all()
    )


def send_due_date_reminders(db: Session, today: date, sender: PushSender = send_push_notification) -> int:
    sent = 0
    for task in due_today(db, today):
        subscriptions = db.query(PushSubscription).filter(PushSubscription.user_id == task.assigned_to).all()
        payload = {
            "title": "Task Due Today",
            "body": f'Don\'t forget: "{task.title}" is due today!',
            "data": {
                "taskId": task.id,
                "projectId": task.project_id,
                "boardId": task.board_id,
                "type": "due_date_reminder",
            },
        }
        for subscription in subscriptions:
            if sender(subscription, payload):
                sent += 1

    logger.info("Sent %d due date reminder notifications", sent)
    return sent


def send_status_change_notifications(
    db: Session,
    task: Task,
    previous_status: TaskStatus,
    sender: PushSender = send_push_notification,
) -> int:
    """Tell every project member except the assignee that a task changed status."""
    status = TaskStatus(task.status)
    if status == previous_status:
        return 0
    project = db.get(Project, task.project_id)
    if project is None:
        logger.warning("Project %s not found for task %s", task.project_id, task.id)
        return 0

    payload = {
        "title": "Task Updated",
        "body": f'Task "{task.title}" moved to {status.value}',
        "data": {
            "taskId": task.id,
            "projectId": task.project_id,
            "boardId": task.board_id,
            "type": "task_status_change",
        },
    }
    sent = 0
    for member in project.members:
        if member.id == task.assigned_to:
            continue
        for subscription in member.subscriptions:
            if sender(subscription, payload):
                sent += 1

    logger.info("Sent %d task update notifications", sent)
    return sent
