"""
Result Exporter - Write request and query results of recorded steps to disk.

One file per step (plus an index suffix when a step issues several):

    <output_dir>/<api_folder>/Step_<n>_api[_<i>].json
    <output_dir>/<database_folder>/Step_<n>_database[_<i>].csv
    <output_dir>/Step_<n>[_<i>].png
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, TYPE_CHECKING
import csv
import json
import logging

from replay_runtime.engine.request_executor import RawResponse, split_url

if TYPE_CHECKING:
    from replay_runtime.config.settings import ExportSettings

logger = logging.getLogger(__name__)


def _suffix(index: Optional[int]) -> str:
    return f"_{index}" if index is not None else ""


class ResultExporter:
    """
    Export API responses as JSON, DB row-sets as CSV and step screenshots
    as PNG.
    
    Example:
        >>> exporter = ResultExporter("./test-results/run_123")
        >>> exporter.export_api_result(response, step_index=9, request_index=0)
        >>> exporter.export_db_result(rows, step_index=9, query="select ...")
    """
    
    def __init__(
        self,
        output_dir: str | Path,
        api_folder: str = "api-execution",
        database_folder: str = "database-execution",
    ):
        """
        Initialize the exporter.
        
        Args:
            output_dir: Base output directory
            api_folder: Sub-folder for API results
            database_folder: Sub-folder for database results
        """
        self.output_dir = Path(output_dir)
        self.api_dir = self.output_dir / api_folder
        self.database_dir = self.output_dir / database_folder
    
    @classmethod
    def from_settings(cls, settings: "ExportSettings", run_id: Optional[str] = None) -> "ResultExporter":
        output_dir = Path(settings.output_dir)
        if run_id:
            output_dir = output_dir / run_id
        return cls(output_dir, settings.api_folder, settings.database_folder)
    
    def screenshot_path(self, step_index: int, index: Optional[int] = None) -> Path:
        """Path of a step screenshot; creates the run directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / f"Step_{step_index}{_suffix(index)}.png"
    
    async def capture_screenshot(
        self,
        page: Any,
        step_index: int,
        index: Optional[int] = None,
        full_page: bool = False,
    ) -> Path:
        """
        Save a screenshot of the page for a step.
        
        Args:
            page: Playwright Page
            step_index: Step number in the script
            index: Position of the screenshot within the step
            full_page: Capture the full scrollable page
            
        Returns:
            Path of the written file
        """
        path = self.screenshot_path(step_index, index)
        await page.screenshot(path=path, full_page=full_page)
        logger.debug(f"Captured screenshot: {path}")
        return path
    
    def export_api_result(
        self,
        response: RawResponse,
        step_index: int,
        request_index: Optional[int] = None,
    ) -> Path:
        """
        Write one API result as JSON.
        
        Request headers are redacted; the response body is written as
        decoded.
        
        Args:
            response: The response of a request step
            step_index: Step number in the script
            request_index: Position of the request within the step
            
        Returns:
            Path of the written file
        """
        self.api_dir.mkdir(parents=True, exist_ok=True)
        path = self.api_dir / f"Step_{step_index}_api{_suffix(request_index)}.json"
        
        request = response.request
        url = request.url if request else ""
        data: Dict[str, Any] = {
            "step_index": step_index,
            "request_index": request_index,
            "timestamp": datetime.now().isoformat(),
            "request": {
                "method": request.method if request else "GET",
                "url": url,
                **split_url(url),
                "headers": request.redacted_headers() if request else {},
            },
            "response": {
                "status": response.status,
                "status_text": response.status_text,
                "headers": response.headers,
                "body": {"payload": response.body},
                "duration_ms": round(response.duration_ms, 2),
            },
        }
        
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        
        logger.debug(f"Exported API result to {path}")
        return path
    
    def export_db_result(
        self,
        rows: Sequence[Mapping[str, Any]],
        step_index: int,
        query: str = "",
        query_index: Optional[int] = None,
    ) -> Path:
        """
        Write one query result as CSV.
        
        Layout: the query on row 1, an empty row 2, column names (taken from
        the first row) on row 3, data from row 4.
        
        Args:
            rows: Result rows as mappings
            step_index: Step number in the script
            query: The SQL that produced the rows
            query_index: Position of the query within the step
            
        Returns:
            Path of the written file
        """
        self.database_dir.mkdir(parents=True, exist_ok=True)
        path = self.database_dir / f"Step_{step_index}_database{_suffix(query_index)}.csv"
        
        columns: List[str] = list(rows[0].keys()) if rows else []
        
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow([f"Query: {query or ''}"])
            writer.writerow([])
            if columns:
                writer.writerow(columns)
                for row in rows:
                    writer.writerow(["" if row.get(c) is None else row.get(c) for c in columns])
        
        logger.debug(f"Exported {len(rows)} row(s) to {path}")
        return path
