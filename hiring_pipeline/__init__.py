"""
Hiring Pipeline - applicant tracking state machine and funnel analytics.
"""

__app_name__ = "Hiring Pipeline"
__version__ = "0.1.0"
