"""HTTP wrapper used by workflow-automation tools."""
