"""
Leaderboard scoring, rank encoding and Riot synchronisation.
"""
