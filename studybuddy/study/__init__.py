"""
Summary-derived study aids.

Provides:
- Segmentation of summary text into study points
- Flashcard deck navigation and autoplay
- Radial mind-map layout
- Quiz lifecycle and scoring
"""

from studybuddy.study.flashcards import AutoplaySpeed, AutoplayTicker, FlashcardDeck
from studybuddy.study.mindmap import MindMap, MindMapView, layout
from studybuddy.study.quiz_engine import (
    QuizConfig,
    QuizPhase,
    QuizQuestion,
    QuizResults,
    QuizSession,
    grade_for,
    score_quiz,
)
from studybuddy.study.segmentation import segment, source_text, study_points

__all__ = [
    "segment",
    "source_text",
    "study_points",
    "FlashcardDeck",
    "AutoplaySpeed",
    "AutoplayTicker",
    "MindMap",
    "MindMapView",
    "layout",
    "QuizConfig",
    "QuizPhase",
    "QuizQuestion",
    "QuizResults",
    "QuizSession",
    "grade_for",
    "score_quiz",
]
