"""
Outfit assignment engine: fingerprints, recommender contract, daily and weekly planning.
"""
