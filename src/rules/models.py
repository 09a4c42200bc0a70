from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class WindowRules(BaseModel):
    daily_days: int = Field(30, ge=0)
    weekly_weeks: int = Field(12, ge=0)


class RankingRules(BaseModel):
    top_entities: int = Field(5, ge=0)
    top_search_terms: int = Field(10, ge=0)


class BreakdownRules(BaseModel):
    known_categories: list[str] = ["PENDING", "CONTACTED", "CLOSED"]

    @field_validator("known_categories")
    @classmethod
    def _not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("known_categories must list at least one category")
        return v


class QueryRules(BaseModel):
    concurrent: bool = True
    max_workers: int = Field(4, ge=1)


class AnalyticsRules(BaseModel):
    windows: WindowRules = WindowRules()
    ranking: RankingRules = RankingRules()
    breakdown: BreakdownRules = BreakdownRules()
    queries: QueryRules = QueryRules()


class Rules(BaseModel):
    project: ProjectRules
    analytics: AnalyticsRules = AnalyticsRules()
