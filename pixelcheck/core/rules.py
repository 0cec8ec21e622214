"""
Heuristic override rules applied on top of the linear scorer.

Rules are pure functions of an immutable RuleContext. They run in a fixed
priority order and the last rule that returns a Decision wins; every rule
that returned one is recorded so the verdict can be explained.
"""
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from ..config.settings import RuleThresholds
from .schemas import CLASS_LABELS, ConfidenceTier, FeatureVector, ImageLabel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    label: ImageLabel
    confidence: ConfidenceTier


@dataclass(frozen=True)
class IndicatorCounts:
    """Evidence counters shared by several rules"""
    signature: bool
    supporting: int
    extreme: int
    strong_real: int
    graphic: int

    @property
    def ai_total(self) -> int:
        return self.supporting + self.extreme

    def as_dict(self) -> Dict[str, int]:
        return {
            "supporting": self.supporting,
            "extreme": self.extreme,
            "ai_total": self.ai_total,
            "strong_real": self.strong_real,
            "graphic": self.graphic,
        }


@dataclass(frozen=True)
class RuleContext:
    features: FeatureVector
    probabilities: Dict[str, float]
    counts: IndicatorCounts
    thresholds: RuleThresholds
    decision: Decision

    @property
    def max_probability(self) -> float:
        return max(self.probabilities.values())


class Rule(NamedTuple):
    name: str
    apply: Callable[[RuleContext], Optional[Decision]]


class OverrideOutcome(NamedTuple):
    label: ImageLabel
    confidence: ConfidenceTier
    fired_rules: List[str]
    counts: IndicatorCounts


def count_indicators(f: FeatureVector, t: RuleThresholds) -> IndicatorCounts:
    supporting = [
        f.texture > t.supporting_texture_min,
        f.noise <= t.supporting_noise_max,
        f.gradient > t.supporting_gradient_min,
        f.frequency > t.supporting_frequency_min,
        f.metadata < t.supporting_metadata_max,
    ]
    extreme = [
        f.pattern > t.extreme_pattern_min,
        f.texture > t.extreme_texture_min,
        f.gradient > t.extreme_gradient_min,
        f.frequency > t.extreme_frequency_min,
    ]
    strong_real = [
        f.noise > t.real_noise_min,
        f.edge < t.real_edge_max,
        f.pattern < t.real_pattern_max,
        f.texture < t.real_texture_max,
        f.metadata > t.real_metadata_min,
    ]
    graphic = [
        f.transparency > t.graphic_transparency_min,
        f.edge > t.graphic_edge_min,
        f.color < t.graphic_color_max,
        f.noise < t.graphic_noise_max,
    ]
    return IndicatorCounts(
        signature=f.pattern >= t.signature_pattern_min and f.edge <= t.signature_edge_max,
        supporting=sum(supporting),
        extreme=sum(extreme),
        strong_real=sum(strong_real),
        graphic=sum(graphic),
    )


def ai_signature(ctx: RuleContext) -> Optional[Decision]:
    """Highly regular patterns with soft edges, backed by supporting indicators"""
    t = ctx.thresholds
    if ctx.counts.signature and ctx.counts.supporting >= t.signature_min_support:
        high = ctx.counts.supporting >= t.signature_high_support
        return Decision(ImageLabel.AI_GENERATED, ConfidenceTier.HIGH if high else ConfidenceTier.MEDIUM)
    return None


def extreme_indicators(ctx: RuleContext) -> Optional[Decision]:
    t = ctx.thresholds
    if ctx.counts.extreme >= t.extreme_min_count:
        high = ctx.counts.extreme == 4
        return Decision(ImageLabel.AI_GENERATED, ConfidenceTier.HIGH if high else ConfidenceTier.MEDIUM)
    return None


def real_camera_pattern(ctx: RuleContext) -> Optional[Decision]:
    """Camera-like metadata on an opaque, not overly regular image"""
    f, t = ctx.features, ctx.thresholds
    if f.metadata > t.camera_metadata_min and f.pattern < t.camera_pattern_max and f.transparency == 0:
        return Decision(ImageLabel.REAL, ConfidenceTier.HIGH)
    return None


def strong_real(ctx: RuleContext) -> Optional[Decision]:
    t = ctx.thresholds
    if ctx.counts.strong_real >= t.real_min_count:
        high = ctx.counts.strong_real >= t.real_high_count
        return Decision(ImageLabel.REAL, ConfidenceTier.HIGH if high else ConfidenceTier.MEDIUM)
    return None


def graphic_design(ctx: RuleContext) -> Optional[Decision]:
    """Transparency, crisp edges, small palette and no noise"""
    if ctx.counts.graphic >= ctx.thresholds.graphic_min_count:
        return Decision(ImageLabel.GRAPHIC_DESIGN, ConfidenceTier.HIGH)
    return None


def anti_false_positive(ctx: RuleContext) -> Optional[Decision]:
    """An AI verdict needs at least three AI indicators in total"""
    if (ctx.decision.label == ImageLabel.AI_GENERATED
            and ctx.counts.ai_total < ctx.thresholds.ai_min_total_indicators):
        return Decision(ImageLabel.REAL, ConfidenceTier.MEDIUM)
    return None


def low_regularity(ctx: RuleContext) -> Optional[Decision]:
    f, t = ctx.features, ctx.thresholds
    if (f.pattern < t.low_regularity_pattern_max
            and f.texture < t.low_regularity_texture_max
            and f.color > t.low_regularity_color_min):
        return Decision(ImageLabel.REAL, ConfidenceTier.MEDIUM)
    return None


def confidence_floor(ctx: RuleContext) -> Optional[Decision]:
    if ctx.max_probability < ctx.thresholds.min_probability:
        return Decision(ImageLabel.REAL, ConfidenceTier.LOW)
    return None


# Later rules override earlier ones. The camera pattern runs before the strong
# real rule so that the strong real rule decides the confidence when both match.
DEFAULT_RULES: Sequence[Rule] = (
    Rule("ai_signature", ai_signature),
    Rule("extreme_indicators", extreme_indicators),
    Rule("real_camera_pattern", real_camera_pattern),
    Rule("strong_real", strong_real),
    Rule("graphic_design", graphic_design),
    Rule("anti_false_positive", anti_false_positive),
    Rule("low_regularity", low_regularity),
    Rule("confidence_floor", confidence_floor),
)


class RuleOverrideEngine:
    """Stateless evaluator for an ordered rule list"""

    def __init__(self, thresholds: Optional[RuleThresholds] = None, rules: Sequence[Rule] = DEFAULT_RULES):
        self.thresholds = thresholds or RuleThresholds()
        self.rules = tuple(rules)

    def evaluate(
        self,
        features: FeatureVector,
        probabilities: Dict[str, float],
        provisional_label: Optional[str] = None,
    ) -> OverrideOutcome:
        """
        Apply the rules to a scorer output

        Args:
            features: Feature vector the scorer was fed
            probabilities: Class key -> probability from the scorer
            provisional_label: Class key picked by the scorer; argmax of
                probabilities when omitted

        Returns:
            Final label, confidence tier, fired rule names and indicator counts
        """
        if provisional_label is None:
            provisional_label = max(probabilities, key=probabilities.get)

        counts = count_indicators(features, self.thresholds)
        ctx = RuleContext(
            features=features,
            probabilities=dict(probabilities),
            counts=counts,
            thresholds=self.thresholds,
            decision=Decision(CLASS_LABELS[provisional_label], ConfidenceTier.LOW),
        )

        fired: List[str] = []
        for rule in self.rules:
            decision = rule.apply(ctx)
            if decision is not None:
                fired.append(rule.name)
                ctx = replace(ctx, decision=decision)

        logger.debug(f"Override rules fired: {fired}, final: {ctx.decision}")
        return OverrideOutcome(ctx.decision.label, ctx.decision.confidence, fired, counts)
