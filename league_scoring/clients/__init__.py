"""API clients for the league scoring engine."""

from league_scoring.clients.datagolf import DataGolfClient, DataGolfError, get_datagolf_client

__all__ = ["DataGolfClient", "DataGolfError", "get_datagolf_client"]
