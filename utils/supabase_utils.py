import time

import structlog

from utils.errors import PreferenceStoreError

log = structlog.get_logger()


def insert_with_retry(table, data, retries=3, delay=1):
    last_error = None
    for attempt in range(retries):
        try:
            response = table.insert(data).execute()
            if response.data:
                return response
            last_error = "empty response"
        except Exception as e:
            last_error = e
            log.warning("Supabase insert failed", attempt=attempt + 1, error=str(e))
        if attempt < retries - 1:
            time.sleep(delay * (2 ** attempt))  # Exponential backoff
    raise PreferenceStoreError(f"Supabase insert failed after retries: {last_error}")
