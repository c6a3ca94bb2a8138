#!/usr/bin/env python3
"""
Scoring Module - driver/job and company/candidate match scoring.

Public API:
- MatchScoringService: per-pair pipeline orchestrator
- MatchResult: fused score with explanations

The module is split into focused, single-responsibility modules:

- models.py: Data structures (features, component scores, MatchResult)
- normalize.py: Attribute normalization (driver type, route, freight, states)
- features.py: Stored rows to scorer inputs, PII-free text blocks
- driver_rules.py: Driver -> job rules scorer
- company_rules.py: Company -> candidate rules scorer
- semantic.py: Embedding similarity with timeout and per-batch memo
- behavior.py: Per-driver feedback and interaction signal
- fusion.py: Weighted fusion, confidence, reason/caution ordering
- service.py: MatchScoringService orchestrator
"""

from matching.scorer.models import MatchResult
from matching.scorer.service import MatchScoringService

__all__ = ['MatchScoringService', 'MatchResult']
