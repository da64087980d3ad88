from djemini.stages.classify import Classifier
from djemini.stages.ingest import Ingestor
from djemini.stages.publish import Publisher
from djemini.stages.sources import SourceCatalog
from djemini.stages.synthesize import PlaylistSynthesizer

__all__ = [
    "Classifier",
    "Ingestor",
    "PlaylistSynthesizer",
    "Publisher",
    "SourceCatalog",
]
