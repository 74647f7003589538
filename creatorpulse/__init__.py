"""
CreatorPulse - Social performance dashboard and AI video script drafting

Derives growth and content-quality metrics from connected social accounts,
and drafts video scripts, voiceover direction and image prompts with OpenAI.
"""

__version__ = "0.1.0"
__author__ = "CreatorPulse Team"
