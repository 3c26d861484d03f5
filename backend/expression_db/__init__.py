"""Expression DB: genes, transcripts and cufflinks models with FPKM expression."""

__version__ = "1.0.0"
