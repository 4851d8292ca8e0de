"""
Annotation Performance Dashboard

Analytics backend that pulls annotation production and login sheets from
publicly shared Google Spreadsheets and folds them into performance,
quality and attendance summaries.

To add a new column spelling:
    Add the normalised spelling to the matching entry of
    config.KEY_ALIASES. Every summary resolves its columns through
    keys.find_key(), so no builder needs to change.

To connect to Streamlit/Dash:
    Merge the selected sheets with ingestion.IngestionMerger, then pass the
    published rows to transforms.build_summaries() and
    dashboard.get_metric_cards().

To use a different project store:
    Implement load() / save() as in projects.ProjectStore.
"""
