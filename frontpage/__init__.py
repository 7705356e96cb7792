"""
front-page tracker package.

Modules
───────
models    — Pydantic models (CaptureRequest, CaptureArtifact, analysis results)
errors    — error taxonomy mapped to HTTP statuses
renderer  — Playwright capture with ad/tracker request blocking
cleanup   — consent-banner and ad-placeholder removal strategies
encoder   — WebP transcoding (Pillow)
store     — keep-latest-N screenshot store
pipeline  — capture state machine under a ceiling timer
prompts   — prompt templates for every analysis kind
decoding  — code-fence stripping, JSON decoding, shape validation
analyst   — Claude vision analyses and the streaming follow-up Q&A
services  — BBC World Service front pages by region
"""
