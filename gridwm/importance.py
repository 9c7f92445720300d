"""
Window Importance Scoring

Ranks windows for cascade role assignment. The score is a weighted sum:

    0.4 * app preference      (learned, 0-1, default 0.5)
  + 0.3 * category importance (fixed per app category)
  + 0.2 * size importance     (window area / screen area * 2, capped at 1)
  + 0.1 * recency             (0.5 without focus history)
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from .objects import WindowImportance, WindowState
from .protocol import Size

PREFERENCE_WEIGHT = 0.4
CATEGORY_WEIGHT = 0.3
SIZE_WEIGHT = 0.2
RECENCY_WEIGHT = 0.1

DEFAULT_PREFERENCE = 0.5
DEFAULT_RECENCY = 0.5


class AppCategory(Enum):
    CODE_EDITOR = "code_editor"
    BROWSER = "browser"
    COMMUNICATION = "communication"
    DESIGN = "design"
    PRODUCTIVITY = "productivity"
    MEDIA = "media"
    TERMINAL = "terminal"
    DATABASE = "database"
    OTHER = "other"


CATEGORY_IMPORTANCE: Dict[AppCategory, float] = {
    AppCategory.CODE_EDITOR: 0.9,
    AppCategory.DESIGN: 0.85,
    AppCategory.BROWSER: 0.8,
    AppCategory.DATABASE: 0.75,
    AppCategory.TERMINAL: 0.7,
    AppCategory.PRODUCTIVITY: 0.7,
    AppCategory.COMMUNICATION: 0.6,
    AppCategory.MEDIA: 0.5,
    AppCategory.OTHER: 0.5,
}

# Lowercase app name -> category for well-known applications
APP_CATEGORIES: Dict[str, AppCategory] = {
    "safari": AppCategory.BROWSER,
    "google chrome": AppCategory.BROWSER,
    "chrome": AppCategory.BROWSER,
    "arc": AppCategory.BROWSER,
    "firefox": AppCategory.BROWSER,
    "xcode": AppCategory.CODE_EDITOR,
    "visual studio code": AppCategory.CODE_EDITOR,
    "vs code": AppCategory.CODE_EDITOR,
    "cursor": AppCategory.CODE_EDITOR,
    "intellij": AppCategory.CODE_EDITOR,
    "pycharm": AppCategory.CODE_EDITOR,
    "sublime": AppCategory.CODE_EDITOR,
    "atom": AppCategory.CODE_EDITOR,
    "messages": AppCategory.COMMUNICATION,
    "slack": AppCategory.COMMUNICATION,
    "discord": AppCategory.COMMUNICATION,
    "mail": AppCategory.COMMUNICATION,
    "telegram": AppCategory.COMMUNICATION,
    "whatsapp": AppCategory.COMMUNICATION,
    "terminal": AppCategory.TERMINAL,
    "iterm2": AppCategory.TERMINAL,
    "figma": AppCategory.DESIGN,
    "sketch": AppCategory.DESIGN,
    "photoshop": AppCategory.DESIGN,
    "adobe photoshop": AppCategory.DESIGN,
    "illustrator": AppCategory.DESIGN,
    "finder": AppCategory.PRODUCTIVITY,
    "notes": AppCategory.PRODUCTIVITY,
    "notion": AppCategory.PRODUCTIVITY,
    "linear": AppCategory.PRODUCTIVITY,
    "calendar": AppCategory.PRODUCTIVITY,
    "system preferences": AppCategory.PRODUCTIVITY,
    "activity monitor": AppCategory.PRODUCTIVITY,
    "1password 7": AppCategory.PRODUCTIVITY,
    "spotify": AppCategory.MEDIA,
    "tableplus": AppCategory.DATABASE,
    "sequel ace": AppCategory.DATABASE,
}


class ImportanceScorer:
    """Scores windows against a screen and a learned preference map.

    Scores are recomputed on every call and never cached.
    """

    def __init__(
        self,
        screen: Size,
        app_preferences: Optional[Mapping[str, float]] = None,
        category_overrides: Optional[Mapping[str, AppCategory]] = None,
        recent_apps: Optional[Sequence[str]] = None,
    ):
        self.screen = screen
        self.app_preferences = {k.lower(): v for k, v in (app_preferences or {}).items()}
        self.categories = dict(APP_CATEGORIES)
        for app, category in (category_overrides or {}).items():
            self.categories[app.lower()] = category
        # Most recently focused first
        self.recent_apps = [app.lower() for app in (recent_apps or [])]

    def category(self, app: str) -> AppCategory:
        return self.categories.get(app.lower(), AppCategory.OTHER)

    def category_importance(self, app: str) -> float:
        return CATEGORY_IMPORTANCE[self.category(app)]

    def size_importance(self, window: WindowState) -> float:
        screen_area = self.screen.area
        if screen_area <= 0:
            return 0.0
        return min(1.0, window.total_area / screen_area * 2)

    def recency(self, app: str) -> float:
        if not self.recent_apps:
            return DEFAULT_RECENCY
        key = app.lower()
        if key not in self.recent_apps:
            return 0.0
        return 1.0 - self.recent_apps.index(key) / len(self.recent_apps)

    def score(self, window: WindowState) -> WindowImportance:
        factors = {
            "app_preference": min(
                1.0, max(0.0, self.app_preferences.get(window.app.lower(), DEFAULT_PREFERENCE))
            ),
            "category_importance": self.category_importance(window.app),
            "window_size": self.size_importance(window),
            "recency": self.recency(window.app),
        }
        total = (
            factors["app_preference"] * PREFERENCE_WEIGHT
            + factors["category_importance"] * CATEGORY_WEIGHT
            + factors["window_size"] * SIZE_WEIGHT
            + factors["recency"] * RECENCY_WEIGHT
        )
        return WindowImportance(window=window, score=min(1.0, max(0.0, total)), factors=factors)

    def rank(self, windows: Sequence[WindowState]) -> List[WindowImportance]:
        """Score every window, most important first (stable for ties)."""
        return sorted((self.score(w) for w in windows), key=lambda i: i.score, reverse=True)
