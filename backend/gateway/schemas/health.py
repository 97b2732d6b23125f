"""
Backend Gateway — Service Status Schemas
==========================================

What:  Response models for GET / and GET /health, plus the shared error body.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    message: str = Field(description="Liveness banner")


class ServiceInfo(BaseModel):
    name: str
    version: str
    environment: str


class UptimeInfo(BaseModel):
    milliseconds: int
    seconds: int
    formatted: str = Field(description="Human readable, e.g. '1h 2m 3s'")


class SystemInfo(BaseModel):
    python_version: str
    platform: str
    architecture: str
    pid: int


class MemoryInfo(BaseModel):
    """Process memory, each value rendered as whole megabytes ("42 MB")."""
    rss: str = Field(description="Resident set size")
    vms: str = Field(description="Virtual memory size")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall status: ok or degraded")
    message: str = Field(description="Human readable summary")
    timestamp: datetime = Field(description="When the check ran (UTC)")
    database: str = Field(description="Database connectivity: connected, disconnected")
    service: ServiceInfo
    uptime: UptimeInfo
    system: SystemInfo
    memory: MemoryInfo


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "not_found", "server_error")
        message: Human-readable description
        details: Optional extra context
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
