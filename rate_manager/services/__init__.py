"""
Services package.

Re-exports the service classes and entry points:
    from rate_manager.services import RateFactorCalculator, get_workspace
"""

from .campaigns import resolve_campaigns, is_campaign_valid, best_ordinary_campaign, find_deep_deal
from .rate_factors import RateFactorCalculator, forward, inverse
from .guardrails import clamp, apply_guardrails
from .differentials import calculate_differential
from .overrides import OverrideStore, OverrideState
from .submission import SubmissionPipeline
from .calendar_service import CalendarAssembler
from .config_store import AssetConfigStore, profile_from_dict
from .feeds import SnapshotMetricsFeed, SnapshotPickupFeed
from .pms_gateway import PmsGateway, PmsRateClient
from .workspace import RateGridWorkspace, get_workspace, reset_workspaces
from .snapshot_import import SnapshotImportService
from .export_service import CalendarPDFExporter

__all__ = [
    'resolve_campaigns', 'is_campaign_valid', 'best_ordinary_campaign', 'find_deep_deal',
    'RateFactorCalculator', 'forward', 'inverse',
    'clamp', 'apply_guardrails',
    'calculate_differential',
    'OverrideStore', 'OverrideState',
    'SubmissionPipeline',
    'CalendarAssembler',
    'AssetConfigStore', 'profile_from_dict',
    'SnapshotMetricsFeed', 'SnapshotPickupFeed',
    'PmsGateway', 'PmsRateClient',
    'RateGridWorkspace', 'get_workspace', 'reset_workspaces',
    'SnapshotImportService',
    'CalendarPDFExporter',
]
