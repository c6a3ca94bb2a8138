#!/usr/bin/env python3
"""
Score Fusion & Explanation Engine.

Pure function of its inputs. Each available component is normalized to a
fraction of its maximum and combined as

    overall = round(100 * sum(w_i * f_i) / sum(w_i))

over the components that are present, so a missing semantic signal has its
weight redistributed proportionally. Reasons and cautions are ordered by
weighted contribution (descending) with ties broken by declaration order.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple

from matching.config_loader import FusionConfig
from matching.scorer.models import (
    FACTOR_ORDER,
    BehaviorResult,
    ComponentScore,
    Confidence,
    Factor,
    MatchReason,
    MatchResult,
    RuleCategory,
    RulesResult,
    SemanticResult,
    SignalComponent,
)

SEMANTIC_MAX = 100.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def component_weights(config: FusionConfig) -> Dict[SignalComponent, float]:
    return {
        SignalComponent.RULES: config.rules_weight,
        SignalComponent.SEMANTIC: config.semantic_weight,
        SignalComponent.BEHAVIOR: config.behavior_weight,
    }


def effective_weights(
    available: List[SignalComponent], config: FusionConfig
) -> Dict[SignalComponent, float]:
    """Weights of the available components rescaled to sum to 1."""
    weights = component_weights(config)
    total = sum(max(0.0, weights[c]) for c in available)
    if total <= 0:
        return {c: 0.0 for c in available}
    return {c: max(0.0, weights[c]) / total for c in available}


def overall_from_breakdown(breakdown: Mapping[str, ComponentScore], config: FusionConfig) -> int:
    """Overall 0-100 score from the rules/semantic/behavior summary entries of a breakdown."""
    available = [c for c in SignalComponent if c.value in breakdown]
    weights = effective_weights(available, config)
    total = sum(weights[c] * breakdown[c.value].fraction for c in available)
    return max(0, min(100, _round_half_up(100 * total)))


def derive_confidence(
    rules: RulesResult,
    semantic: Optional[SemanticResult],
    behavior: Optional[BehaviorResult],
    config: FusionConfig,
) -> Confidence:
    if semantic is None:
        return Confidence.LOW
    if behavior is not None and behavior.has_signal:
        if abs(rules.fraction - behavior.fraction) > config.disagreement_band:
            return Confidence.LOW
    if behavior is not None and rules.fraction >= config.high_confidence_threshold:
        return Confidence.HIGH
    return Confidence.MEDIUM


def _contribution(
    factor: Factor,
    rules: RulesResult,
    behavior: Optional[BehaviorResult],
    weights: Dict[SignalComponent, float],
) -> float:
    if isinstance(factor.component, RuleCategory):
        component = rules.breakdown.get(factor.component)
        if component is None or rules.max_score <= 0:
            return 0.0
        if factor.points is not None:
            points = factor.points
        elif factor.positive:
            points = component.score
        else:
            points = component.max_score - component.score
        return points / rules.max_score * weights[SignalComponent.RULES]

    if factor.component == SignalComponent.BEHAVIOR and behavior is not None and behavior.max_score > 0:
        return (factor.points or 0.0) / behavior.max_score * weights.get(SignalComponent.BEHAVIOR, 0.0)

    if factor.component == SignalComponent.SEMANTIC:
        return (factor.points or 0.0) / SEMANTIC_MAX * weights.get(SignalComponent.SEMANTIC, 0.0)

    return 0.0


def _order(factors: List[Tuple[Factor, float]]) -> List[MatchReason]:
    ranked = sorted(
        factors,
        key=lambda item: (-round(item[1], 9), FACTOR_ORDER.get(item[0].component, len(FACTOR_ORDER))),
    )
    return [MatchReason(text=f.text, positive=f.positive) for f, _ in ranked]


def fuse_scores(
    rules: RulesResult,
    semantic: Optional[SemanticResult],
    behavior: Optional[BehaviorResult],
    config: FusionConfig,
    computed_at: Optional[datetime] = None,
) -> MatchResult:
    """
    Combine sub-scores into a MatchResult.

    Args:
        rules: Rules scorer output (always present).
        semantic: Semantic scorer output, or None when the signal is unavailable.
        behavior: Behavior scorer output, or None where no behavior signal applies
            (company -> candidate scoring).
        config: Fusion weights, thresholds and display caps.
        computed_at: Timestamp recorded on the result.

    Returns:
        MatchResult with full reason/caution/missing-field lists.
    """
    breakdown: Dict[str, ComponentScore] = {
        category.value: component for category, component in rules.breakdown.items()
    }
    rules_detail = "Hard driver-type mismatch cap applied" if rules.hard_mismatch else "Attribute rules"
    breakdown[SignalComponent.RULES.value] = ComponentScore(rules.score, rules.max_score, rules_detail)

    available = [SignalComponent.RULES]
    factors: List[Factor] = list(rules.factors)

    if semantic is not None:
        available.append(SignalComponent.SEMANTIC)
        phrase_detail = f"Shared terms: {', '.join(semantic.phrases)}" if semantic.phrases else "Embedding similarity"
        breakdown[SignalComponent.SEMANTIC.value] = ComponentScore(semantic.similarity, SEMANTIC_MAX, phrase_detail)
        if semantic.similarity / SEMANTIC_MAX >= config.semantic_reason_threshold:
            text = "Your background closely matches this job's description"
            if semantic.phrases:
                text = f"{text} ({', '.join(semantic.phrases[:3])})"
            factors.append(Factor(SignalComponent.SEMANTIC, text, True, points=semantic.similarity))

    if behavior is not None:
        available.append(SignalComponent.BEHAVIOR)
        breakdown[SignalComponent.BEHAVIOR.value] = ComponentScore(behavior.score, behavior.max_score, behavior.detail)
        factors.extend(behavior.factors)

    weights = effective_weights(available, config)
    scored = [(f, _contribution(f, rules, behavior, weights)) for f in factors]

    return MatchResult(
        overall_score=overall_from_breakdown(breakdown, config),
        rules_score=rules.score,
        semantic_score=semantic.similarity if semantic is not None else None,
        behavior_score=behavior.score if behavior is not None else None,
        confidence=derive_confidence(rules, semantic, behavior, config),
        top_reasons=_order([item for item in scored if item[0].positive]),
        cautions=_order([item for item in scored if not item[0].positive]),
        missing_fields=list(rules.missing_fields),
        score_breakdown=breakdown,
        degraded_mode=semantic is None,
        computed_at=computed_at or datetime.now(timezone.utc),
        semantic_phrases=list(semantic.phrases) if semantic is not None else [],
        provider=semantic.provider if semantic is not None else None,
        model=semantic.model if semantic is not None else None,
    )
