"""
End-to-end slotting analysis for one upload.

validate -> group locations into bays -> bay metrics -> Pareto + insights
"""

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Union

from core.bay_grouping import (
    BayGroupingResult,
    BayMetrics,
    BayTransformConfig,
    BayTransformStrategy,
    assign_bays,
    calculate_bay_metrics,
    detect_best_strategy,
    summarize_bays,
    transform_locations_to_bays,
)
from core.data_ingest import LocationRow, PickRow
from core.pareto import (
    ComprehensivePareto,
    ParetoInsight,
    generate_comprehensive_insights,
    generate_comprehensive_pareto,
)
from core.validation import ValidationResult, validate_upload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlottingAnalysis:
    validation: ValidationResult
    strategy: BayTransformStrategy
    grouping: List[BayGroupingResult]
    bay_metrics: List[BayMetrics]
    locations: List[LocationRow]  # Input locations with bay assigned
    pareto: ComprehensivePareto
    insights: Dict[str, List[ParetoInsight]]

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def run_slotting_analysis(
    picks: Sequence[PickRow],
    locations: Sequence[LocationRow],
    strategy: Optional[Union[BayTransformStrategy, str]] = None,
    strategy_config: Optional[BayTransformConfig] = None,
) -> SlottingAnalysis:
    """
    Run the full analysis over parsed PICK and LOCATION rows.

    Validation findings never stop the run; check ``is_valid`` on the
    result before acting on the Pareto output.

    Args:
        picks: Parsed pick rows
        locations: Parsed location rows (bay may be blank)
        strategy: Bay grouping strategy; auto-detected when omitted
        strategy_config: Config dataclass for the chosen strategy

    Returns:
        SlottingAnalysis bundling every stage's output

    Raises:
        BayConfigurationError: Strategy / config mismatch
    """
    if strategy is None:
        strategy = detect_best_strategy(locations)
        logger.info("Auto-detected bay strategy: %s", strategy.value)

    grouping = transform_locations_to_bays(locations, strategy, strategy_config)
    tallies = calculate_bay_metrics(grouping)
    bay_metrics = summarize_bays(tallies, picks)
    enriched = assign_bays(locations, grouping)

    # Findings refer to the rows as uploaded, before bay assignment
    validation = validate_upload(picks, locations, bay_metrics)

    pareto = generate_comprehensive_pareto(picks, enriched, bay_metrics)
    insights = generate_comprehensive_insights(pareto)

    if not validation.is_valid:
        logger.warning("Upload has %d validation errors", len(validation.errors))

    return SlottingAnalysis(
        validation=validation,
        strategy=BayTransformStrategy(strategy),
        grouping=grouping,
        bay_metrics=bay_metrics,
        locations=enriched,
        pareto=pareto,
        insights=insights,
    )
