"""
News Rank - FastAPI application for personalized news search

Hybrid article retrieval using:
- Google Gen AI (query embeddings)
- PostgreSQL + pgvector (dense and sparse vector search, article metadata)
- BM25 sparse query vectors + Reciprocal Rank Fusion
- Recency-weighted re-ranking with adaptive date windows
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Load environment variables from .env.local (local dev) or .env (production)
from dotenv import load_dotenv

env_local = Path(__file__).parent.parent / ".env.local"
env_file = Path(__file__).parent.parent / ".env"

if env_local.exists():
    load_dotenv(env_local, override=True)
elif env_file.exists():
    load_dotenv(env_file, override=True)

from .logging_config import setup_logging

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
setup_logging(
    log_file=os.getenv("LOG_FILE", "logs/newsrank.log"),
    console_level=getattr(logging, log_level, logging.INFO),
    file_level=logging.DEBUG,
)

logger = logging.getLogger(__name__)

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .bm25.tokenizer import Tokenizer
from .config import SearchSettings
from .database import NewsDB, PgArticleStore, PgBm25CorpusStore, PgDenseIndex, PgSparseIndex
from .embeddings import GeminiEmbeddingProvider, create_genai_client
from .errors import ProviderError
from .hydrator import ResultHydrator
from .models import DisplayScoredArticle
from .retrieval.dense import DenseRetriever
from .retrieval.sparse import SparseRetriever
from .search import DENSE, HYBRID, SPARSE, HybridSearch

PORT = int(os.getenv("PORT", "8080"))

APP_VERSION = "0.1.0"
APP_START_TIME = datetime.utcnow().isoformat() + "Z"

# Global instances
news_db = NewsDB()
search_engine: Optional[HybridSearch] = None


def build_search_engine(db: NewsDB, settings: SearchSettings, genai_client) -> HybridSearch:
    """Wire retrievers, hydrator and orchestrator from settings"""
    tokenizer = Tokenizer(remove_stopwords=settings.remove_stopwords, stem=settings.stemming)
    dense = DenseRetriever(
        embedder=GeminiEmbeddingProvider(genai_client, model=settings.embedding_model),
        index=PgDenseIndex(db),
    )
    sparse = SparseRetriever(
        corpus_store=PgBm25CorpusStore(db),
        index=PgSparseIndex(db),
        tokenizer=tokenizer,
        k3=settings.bm25_k3,
        max_terms=settings.bm25_max_query_terms,
    )
    hydrator = ResultHydrator(
        store=PgArticleStore(db),
        window_days=settings.date_windows,
        dedupe_fingerprints=settings.dedupe_fingerprints,
    )
    return HybridSearch(dense, sparse, hydrator, settings=settings, tokenizer=tokenizer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources"""
    global search_engine

    settings = SearchSettings.from_env()
    logger.info(f"Search settings: {settings}")

    genai_client = create_genai_client(
        api_key=os.getenv("GOOGLE_API_KEY"),
        project_id=os.getenv("GCP_PROJECT_ID"),
        location=os.getenv("GCP_LOCATION", "us-central1"),
    )

    logger.info("Connecting to database...")
    await news_db.connect()

    search_engine = build_search_engine(news_db, settings, genai_client)
    logger.info("Search engine initialized")

    yield

    logger.info("Shutting down...")
    await news_db.disconnect()
    search_engine = None


app = FastAPI(
    title="News Rank API",
    description="Hybrid dense + BM25 article search with recency ranking",
    version=APP_VERSION,
    lifespan=lifespan,
)


def get_search_engine() -> HybridSearch:
    if search_engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search engine not initialized",
        )
    return search_engine


# Request/Response models
class SearchRequest(BaseModel):
    query: str = Field(..., description="User query", min_length=1)
    limit: int = Field(default=10, ge=1, le=100, description="Number of articles to return")
    use_hybrid_search: bool = Field(default=False, description="Fuse dense and BM25 results with RRF")
    use_sparse_only: bool = Field(default=False, description="BM25 only (takes precedence over hybrid)")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "query": "semiconductor export controls",
            "limit": 6,
            "use_hybrid_search": True,
            "use_sparse_only": False,
        }
    })


class CitationItem(BaseModel):
    sourceName: str
    articleTitle: str
    url: Optional[str] = None


class ArticleItem(BaseModel):
    article_id: str
    date: datetime
    title: str
    content: str
    fingerprint: str
    tag: str
    citations: List[CitationItem]
    display_score: float

    @classmethod
    def from_scored(cls, scored: DisplayScoredArticle) -> "ArticleItem":
        article = scored.article
        return cls(
            article_id=article.id,
            date=article.published_at,
            title=article.title,
            content=article.body,
            fingerprint=article.content_fingerprint,
            tag=article.tag,
            citations=[
                CitationItem(sourceName=c.source_name, articleTitle=c.article_title, url=c.url)
                for c in article.citations
            ],
            display_score=round(scored.display_score, 6),
        )


class SearchResponse(BaseModel):
    articles: List[ArticleItem]
    count: int
    query: str
    search_method: str
    use_hybrid_search: bool
    use_sparse_only: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    database_connected: bool


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "News Rank API",
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    start_time = datetime.fromisoformat(APP_START_TIME.rstrip('Z'))
    uptime = (datetime.utcnow() - start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        started_at=APP_START_TIME,
        uptime_seconds=round(uptime, 2),
        database_connected=news_db.pool is not None,
    )


@app.post("/v1/search", response_model=SearchResponse)
async def search_articles(
    request: SearchRequest,
    engine: HybridSearch = Depends(get_search_engine),
):
    """
    Search recent news articles.

    **Modes:**
    - default: dense semantic search
    - `use_hybrid_search=true`: dense + BM25 fused with Reciprocal Rank Fusion
    - `use_sparse_only=true`: BM25 only

    Results are restricted to the narrowest date window (2, 3, 7, 14 or 30
    days) that yields `limit` articles, then ranked by a blend of similarity
    and recency.
    """
    if request.use_sparse_only:
        mode = SPARSE
    elif request.use_hybrid_search:
        mode = HYBRID
    else:
        mode = DENSE

    logger.info(f"Received query: \"{request.query}\" with limit: {request.limit}, mode: {mode}")

    try:
        result = await engine.search(request.query, limit=request.limit, mode=mode)
    except ProviderError as e:
        logger.error(f"Search failed ({mode}): {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Search provider failed: {e}",
        )

    if result.failed:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"All search methods failed: {'; '.join(result.errors)}",
        )

    return SearchResponse(
        articles=[ArticleItem.from_scored(a) for a in result.articles],
        count=result.count,
        query=request.query,
        search_method=result.search_method,
        use_hybrid_search=request.use_hybrid_search,
        use_sparse_only=request.use_sparse_only,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsrank.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=True,  # Development only
    )
