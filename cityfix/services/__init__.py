"""
Services layer - business logic lives here, not in routes.

- geocoding: provider chain + cache behind GeocodingGateway
- cluster_aggregation / cluster_service_client: report -> cluster intelligence
- enrichment_pipeline: batched, rate-limited place-name enrichment
- department_classifier, analytics_service: independent views of a snapshot
- report_store, report_service: store subscription and admin write intents
- insights_service: ties store notifications to aggregation + enrichment
"""
