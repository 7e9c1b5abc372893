"""
Feedback dataset preparation for recommender experiments.

Modules are grouped into data handling (indexing, storage, loading and
splitting), evaluation scores, experiment pipelines, and utilities.
"""
