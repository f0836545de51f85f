"""
Campaign Validity Resolver
==========================

Decides which promotions apply to a stay date.

A campaign applies when it is switched on AND the stay date falls in
its inclusive [start_date, end_date] window. Campaigns fall into two
behavioural classes by slug:

    Deep deals (black-friday, limited-time)
        Exclusive. When one applies, no member, ordinary campaign or
        targeting discount is stacked on top of it.

    Ordinary campaigns (everything else)
        Only the single best (largest discount) one applies. Some of
        them (early-deal, late-escape, getaway-deal) also switch off
        the mobile rate.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from rate_manager.domain import CampaignRule, as_date


DEEP_DEAL_SLUGS = frozenset({'black-friday', 'limited-time'})
MOBILE_EXCLUSIVE_SLUGS = frozenset({'early-deal', 'late-escape', 'getaway-deal'})


def is_campaign_valid(stay_date, campaign):
    """
    Check whether a campaign applies to a stay date.

    Args:
        stay_date: date (or ISO string); None is never valid
        campaign: CampaignRule (or anything with the same attributes)

    Returns:
        bool
    """
    if stay_date is None or campaign is None or not campaign.active:
        return False
    if campaign.start_date is None or campaign.end_date is None:
        return False
    stay_date = as_date(stay_date)
    return as_date(campaign.start_date) <= stay_date <= as_date(campaign.end_date)


def is_deep_deal(campaign):
    return campaign.slug in DEEP_DEAL_SLUGS


def valid_campaigns(stay_date, campaigns):
    """All campaigns valid on the date, in their configured order."""
    return [c for c in campaigns if is_campaign_valid(stay_date, c)]


def find_deep_deal(stay_date, campaigns):
    """First deep-deal campaign valid on the date, or None."""
    for campaign in campaigns:
        if is_deep_deal(campaign) and is_campaign_valid(stay_date, campaign):
            return campaign
    return None


def valid_ordinary_campaigns(stay_date, campaigns):
    return [
        c for c in campaigns
        if not is_deep_deal(c) and is_campaign_valid(stay_date, c)
    ]


def pick_best(campaigns):
    """
    Campaign with the strictly greatest discount.

    Ties keep the first one encountered.
    """
    best = None
    for campaign in campaigns:
        if best is None or campaign.discount_percent > best.discount_percent:
            best = campaign
    return best


def best_ordinary_campaign(stay_date, campaigns):
    return pick_best(valid_ordinary_campaigns(stay_date, campaigns))


def blocks_mobile_rate(ordinary_campaigns):
    return any(c.slug in MOBILE_EXCLUSIVE_SLUGS for c in ordinary_campaigns)


@dataclass(frozen=True)
class CampaignResolution:
    """Everything the calculator needs to know about campaigns on one date."""
    deep_deal: Optional[CampaignRule] = None
    ordinary: Tuple[CampaignRule, ...] = ()
    best_ordinary: Optional[CampaignRule] = None

    @property
    def mobile_blocked(self):
        return self.deep_deal is not None or blocks_mobile_rate(self.ordinary)


def resolve_campaigns(stay_date, campaigns):
    """
    Resolve the campaigns that apply to a stay date.

    Returns:
        CampaignResolution
    """
    ordinary = tuple(valid_ordinary_campaigns(stay_date, campaigns))
    return CampaignResolution(
        deep_deal=find_deep_deal(stay_date, campaigns),
        ordinary=ordinary,
        best_ordinary=pick_best(ordinary),
    )
