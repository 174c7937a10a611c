# -*- coding: utf-8 -*-
"""Transparent particle overlay used to celebrate a correct answer."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from PyQt6.QtCore import QPointF, Qt, QTimer
from PyQt6.QtGui import QColor, QPainter, QPolygonF
from PyQt6.QtWidgets import QWidget

from speechquiz.constants import CONFETTI_COLORS, CONFETTI_SHAPES

FRAME_MS = 16


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    angle: float
    spin: float
    size: float
    color: QColor


def _shape_polygon(shape: str, size: float) -> QPolygonF:
    half = size / 2.0
    if shape == "triangle":
        points = [(0.0, -half), (half, half), (-half, half)]
    elif shape == "diamond":
        points = [(0.0, -half), (half * 0.6, 0.0), (0.0, half), (-half * 0.6, 0.0)]
    elif shape == "star":
        points = []
        for i in range(10):
            radius = half if i % 2 == 0 else half * 0.45
            theta = math.pi / 5 * i - math.pi / 2
            points.append((radius * math.cos(theta), radius * math.sin(theta)))
    else:
        points = [(-half, -half * 0.4), (half, -half * 0.4), (half, half * 0.4), (-half, half * 0.4)]
    return QPolygonF([QPointF(x, y) for x, y in points])


class ConfettiOverlay(QWidget):
    """Falling confetti over the whole parent; does not take mouse input."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        intensity: float = 0.5,
        shape: str = "diamond",
        colors: tuple[tuple[float, float, float], ...] = CONFETTI_COLORS,
        seed: int | None = None,
    ) -> None:
        super().__init__(parent)
        if shape not in CONFETTI_SHAPES:
            raise ValueError(f"Unknown confetti shape: {shape}")
        self.intensity = max(0.0, min(1.0, float(intensity)))
        self.shape = shape
        self.colors = [QColor.fromRgbF(r, g, b, 1.0) for r, g, b in colors]
        self.particles: list[Particle] = []
        self._rng = random.Random(seed)
        self._emitting = False
        self._polygon = _shape_polygon(shape, 12.0)

        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_MS)
        self._timer.timeout.connect(self._tick)

    def start_confetti(self) -> None:
        self._emitting = True
        self._timer.start()

    def stop_confetti(self) -> None:
        """Stop emitting; particles already in the air keep falling."""
        self._emitting = False

    def is_active(self) -> bool:
        return self._emitting

    def _emit(self, count: int) -> None:
        width = max(1, self.width())
        for _ in range(count):
            scale = 0.6 + self.intensity * self._rng.random()
            self.particles.append(Particle(
                x=self._rng.uniform(0, width),
                y=-10.0,
                vx=self._rng.uniform(-60.0, 60.0) * self.intensity,
                vy=(120.0 + 230.0 * self.intensity) * self._rng.uniform(0.7, 1.3),
                angle=self._rng.uniform(0, 360),
                spin=self._rng.uniform(-180.0, 180.0) * (1.0 + self.intensity),
                size=scale,
                color=self._rng.choice(self.colors),
            ))

    def step(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds."""
        if self._emitting:
            self._emit(max(1, int(round(12 * self.intensity))))
        height = self.height()
        for particle in self.particles:
            particle.x += particle.vx * dt
            particle.y += particle.vy * dt
            particle.angle = (particle.angle + particle.spin * dt) % 360
        self.particles = [p for p in self.particles if p.y < height + 20]
        if not self._emitting and not self.particles:
            self._timer.stop()

    def _tick(self) -> None:
        self.step(FRAME_MS / 1000.0)
        self.update()

    def paintEvent(self, event) -> None:  # noqa: N802 - Qt override
        del event
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setPen(Qt.PenStyle.NoPen)
        for particle in self.particles:
            painter.save()
            painter.translate(particle.x, particle.y)
            painter.rotate(particle.angle)
            painter.scale(particle.size, particle.size)
            painter.setBrush(particle.color)
            painter.drawPolygon(self._polygon)
            painter.restore()
        painter.end()
