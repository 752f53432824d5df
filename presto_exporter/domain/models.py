"""Response shapes of the Presto status API, shared by both poll loops."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _PrestoModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ClusterSnapshot(_PrestoModel):
    """Body of ``GET /v1/cluster``; missing counters read as zero."""

    running_queries: float = Field(0.0, alias="runningQueries")
    active_workers: float = Field(0.0, alias="activeWorkers")


class QueryStats(_PrestoModel):
    elapsed_time: str = Field("", alias="elapsedTime")
    create_time: str = Field("", alias="createTime")
    end_time: str = Field("", alias="endTime")
    execution_time: str = Field("", alias="executionTime")

    @field_validator(
        "elapsed_time", "create_time", "end_time", "execution_time", mode="before"
    )
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @property
    def is_finished(self) -> bool:
        return self.end_time != ""


class QueryRecord(_PrestoModel):
    """One entry of ``GET /v1/query``; null fields read as empty."""

    query_id: str = Field("", alias="queryId")
    query: str = ""
    query_stats: QueryStats = Field(default_factory=QueryStats, alias="queryStats")

    @field_validator("query_id", "query", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator("query_stats", mode="before")
    @classmethod
    def _null_stats(cls, value):
        return QueryStats() if value is None else value


class QueryDuration(_PrestoModel):
    """Seconds observed for one completed query."""

    query_id: str = ""
    elapsed: float
    execution: float
