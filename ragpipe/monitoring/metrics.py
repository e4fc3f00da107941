"""Prometheus metrics for monitoring."""

from prometheus_client import Counter, Histogram

documents_ingested_total = Counter(
    "rag_documents_ingested_total",
    "Documents that reached a terminal ingestion status", ["status"])
ingestion_duration_seconds = Histogram(
    "rag_ingestion_duration_seconds", "Ingestion pipeline duration",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0])
chunks_indexed_total = Counter(
    "rag_chunks_indexed_total", "Chunks written to the document store")

query_counter = Counter("rag_queries_total",
                        "Total number of queries processed", ["operation"])
query_errors_total = Counter(
    "rag_query_errors_total", "Total number of query errors", ["operation"])
query_latency_seconds = Histogram(
    "rag_query_latency_seconds", "Query latency in seconds",
    ["operation"], buckets=[0.1, 0.5, 1.0, 2.0, 5.0])
tokens_used_total = Counter(
    "rag_tokens_used_total", "Tokens billed by the generation backend")
