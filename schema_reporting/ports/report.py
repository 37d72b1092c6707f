"""Schema report port definition (DTO)."""

from __future__ import annotations

import platform as _platform
import uuid
from dataclasses import dataclass
from typing import Any

__all__ = ["CLIENT_NAME", "CLIENT_VERSION", "SchemaReport"]

CLIENT_NAME = "schema-reporting-python"
CLIENT_VERSION = "0.1.0"


@dataclass(slots=True, frozen=True)
class SchemaReport:
    """Immutable description of the running server's schema.

    Produced once by the owner and sent verbatim on every attempt; the
    full schema body travels separately and only when requested.

    Attributes:
        boot_id: Random id identifying this process lifetime.
        core_schema_hash: SHA-256 hex digest of the core schema.
        graph_ref: Graph reference (``graph@variant``) being reported.
        library_version: Reporting client identity.
        platform: Where the server runs (``local``, ``kubernetes``...).
        runtime_version: Interpreter identity.
        server_id: Stable id of the host/process.
        user_version: Optional user-supplied version string.
    """

    boot_id: str
    core_schema_hash: str
    graph_ref: str
    library_version: str
    platform: str
    runtime_version: str
    server_id: str
    user_version: str | None = None

    @classmethod
    def for_current_process(
        cls,
        *,
        core_schema_hash: str,
        graph_ref: str,
        server_id: str,
        platform: str = "local",
        user_version: str | None = None,
    ) -> SchemaReport:
        """Build a report with the static identity of this process."""
        return cls(
            boot_id=str(uuid.uuid4()),
            core_schema_hash=core_schema_hash,
            graph_ref=graph_ref,
            library_version=f"{CLIENT_NAME}@{CLIENT_VERSION}",
            platform=platform,
            runtime_version=f"python {_platform.python_version()}",
            server_id=server_id,
            user_version=user_version,
        )

    def as_variables(self) -> dict[str, Any]:
        """Render the report as the GraphQL ``SchemaReport`` input object."""
        variables: dict[str, Any] = {
            "bootId": self.boot_id,
            "coreSchemaHash": self.core_schema_hash,
            "graphRef": self.graph_ref,
            "libraryVersion": self.library_version,
            "platform": self.platform,
            "runtimeVersion": self.runtime_version,
            "serverId": self.server_id,
        }
        if self.user_version is not None:
            variables["userVersion"] = self.user_version
        return variables
