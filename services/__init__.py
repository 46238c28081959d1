"""
Service layer for Image Processing Studio.
"""

from .processing_service import ProcessingResult, ProcessingService, QualityReport

__all__ = ["ProcessingService", "ProcessingResult", "QualityReport"]
