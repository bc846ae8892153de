from .brand import BrandProfile, LogoPosition
from .campaign import BudgetType, CampaignSettings, Gender, Objective, TargetingSuggestion
from .concept import AdConcept, AdConceptDraft, number_batch
from .meta import (
    PERSONAL_PORTFOLIO,
    PERSONAL_PORTFOLIO_ID,
    AssetSelection,
    AssetType,
    BusinessPortfolio,
    MetaAsset,
)
from .proxy import DescriptionResponse, NamesResponse, PromptsResponse
from .workflow import WorkflowStep

__all__ = [
    "BrandProfile",
    "LogoPosition",
    "Objective",
    "BudgetType",
    "Gender",
    "CampaignSettings",
    "TargetingSuggestion",
    "AdConceptDraft",
    "AdConcept",
    "number_batch",
    "AssetType",
    "MetaAsset",
    "BusinessPortfolio",
    "AssetSelection",
    "PERSONAL_PORTFOLIO",
    "PERSONAL_PORTFOLIO_ID",
    "NamesResponse",
    "PromptsResponse",
    "DescriptionResponse",
    "WorkflowStep",
]
