"""
CreatorPulse CLI
"""
