from __future__ import annotations

# The browser client calls from arbitrary origins and sends the BaaS client headers.
CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
