# UI module for Focus Flow application
from .timer_window import TimerWindow

__all__ = ['TimerWindow']
