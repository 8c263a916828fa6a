"""
Recommendation engine: converts a snapshot into scores, a label, and
human-readable reasoning / risk factors, then ranks results for display.

Modules
-------
scorer : ScoreRule / NarrativeRule tables + compute_scores() +
         determine_recommendation() + technical_analysis() -- pure functions.
ranker : rank_recommendations() -- top-N by recommendation then trend score.
"""
