"""
Streamlit UI for CreatorPulse.
"""
