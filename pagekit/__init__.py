"""pagekit: local PDF, image, presentation and Markdown transformations.

Packages:
- pagekit.ingest: upload validation and per-tool limits
- pagekit.docs: document handles, page sequences, assembly and export
- pagekit.image: decoding, background fill and fit geometry
- pagekit.render: page rasterization and PDF -> PPTX conversion
- pagekit.markdown: Markdown -> HTML and the print-engine boundary
- pagekit.pipeline: workflow state machine and high-level tools
"""

__version__ = "0.1.0"
