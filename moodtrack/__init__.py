"""MoodTrack - mood-based music recommendations and mood logging"""
