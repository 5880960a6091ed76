"""
MAF Machine
Aerobic progress tracking for runners using the MAF heart-rate method.
"""

__version__ = "1.0.0"
__author__ = ""

from maf_machine.advisor import select_advice
from maf_machine.analyzer import MAFAnalyzer, analyze_activity
from maf_machine.data_manager import MAFDataManager
from maf_machine.settings import AthleteSettings
from maf_machine.summary import compute_summary
from maf_machine.trends import compute_trends

__all__ = [
    "AthleteSettings",
    "MAFAnalyzer",
    "MAFDataManager",
    "analyze_activity",
    "compute_summary",
    "compute_trends",
    "select_advice",
]
