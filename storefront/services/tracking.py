"""
Симуляция отслеживания заказа для страницы подтверждения.

Реальной доставки за этапами нет: этап считается пройденным,
когда с момента оформления прошло заданное в настройках время.
Таймеров нет, время двигается явно через advance(), поэтому
тесты проходят этапы синхронно.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from storefront.core.config import settings
from storefront.schemas.orders import TrackingStepOut


@dataclass(frozen=True)
class TrackingStage:
    """
    Этап отслеживания.

    Attributes:
        id: Порядковый номер этапа
        title: Заголовок
        description: Описание
        after: Через сколько секунд этап пройден (None - никогда)
        date_offset_days: Сдвиг отображаемой даты относительно оформления
    """

    id: int
    title: str
    description: str
    after: Optional[float]
    date_offset_days: int = 0


def default_stages() -> List[TrackingStage]:
    """Этапы с длительностями из настроек."""
    return [
        TrackingStage(1, "Order Confirmed", "Your order has been received", 0.0),
        TrackingStage(
            2, "Processing", "We are preparing your items",
            settings.TRACKING_PROCESSING_AFTER,
        ),
        TrackingStage(
            3, "Shipped", "Your order is on the way",
            settings.TRACKING_SHIPPED_AFTER, date_offset_days=1,
        ),
        TrackingStage(
            4, "Delivered", "Package delivered successfully",
            settings.TRACKING_DELIVERED_AFTER,
        ),
    ]


class TrackingTimeline:
    """Последовательность этапов, которая продвигается вручную."""

    def __init__(self, placed_on: date, stages: Optional[List[TrackingStage]] = None):
        self.placed_on = placed_on
        self.stages = stages if stages is not None else default_stages()
        self.elapsed = 0.0

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Tracking time cannot go backwards")
        self.elapsed += seconds

    def _completed(self, stage: TrackingStage) -> bool:
        return stage.after is not None and self.elapsed >= stage.after

    def steps(self) -> List[TrackingStepOut]:
        return [
            TrackingStepOut(
                id=stage.id,
                title=stage.title,
                description=stage.description,
                completed=self._completed(stage),
                date=(
                    self.placed_on + timedelta(days=stage.date_offset_days)
                    if self._completed(stage)
                    else None
                ),
            )
            for stage in self.stages
        ]

    @property
    def current_stage(self) -> TrackingStage:
        """Последний пройденный этап."""
        done = [stage for stage in self.stages if self._completed(stage)]
        return done[-1] if done else self.stages[0]


def timeline_at(placed_at: datetime, now: datetime) -> TrackingTimeline:
    """Состояние отслеживания на момент now."""
    timeline = TrackingTimeline(placed_at.date())
    timeline.advance(max((now - placed_at).total_seconds(), 0.0))
    return timeline
