"""
Edit suggestions: after a page is saved, point the editor at related pages
that need attention.

Modules
-------
markers  : parse_marker_text() + MarkerRegistry — operator-curated marker
           categories; ``None`` means the feature is disabled.
engine   : CategoryStore protocol + RecommendationEngine — two-tier
           category co-occurrence search.
sampler  : sample() — bounded random pick from the candidate pool.
throttle : SessionState + DisplayThrottle — show once every N edits.
messages : list_to_text() + compose_message() + render_html().
hooks    : EditSimilarHooks — host glue for save-complete and page-output
           events; build_hooks() wires the SQLite repositories.
"""
