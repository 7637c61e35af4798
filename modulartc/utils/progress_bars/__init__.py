from .progress_task import ProgressTask

__all__ = ["ProgressTask"]
