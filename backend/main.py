"""Main entry point for FitCoach AI chat API."""
import logging
import tiktoken
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from config import PORT, CORS_ORIGINS, LLM_PROVIDER
from models.api import ChatRequest, ChatResponse, ReportRequest
from services.chat_orchestrator import ChatOrchestrator, MODELS_UNAVAILABLE
from services.llm_factory import create_llm_client, default_models
from services.report_builder import ReportBuilder, report_filename

# Initialize logging
logger = logging.getLogger(__name__)

HIGH_DEMAND_MESSAGE = "The AI models are currently experiencing high demand. Please try again in a minute."
FAILED_RESPONSE_MESSAGE = "Failed to get response from AI. Please try again."
FAILED_REPORT_MESSAGE = "Failed to generate report. Please try again."

# Initialize FastAPI app
app = FastAPI(
    title="FitCoach AI",
    description="Personal fitness coach chat backend",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,  # Next.js dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
orchestrator: ChatOrchestrator = None
report_builder: ReportBuilder = None
tiktoken_encoder = None


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


def _count_tokens(text: str) -> int:
    return len(tiktoken_encoder.encode(text))


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global orchestrator, report_builder, tiktoken_encoder

    logger.info("Initializing FitCoach AI services...")

    try:
        # Rough prompt-size estimate for logging; provider tokenizers differ
        tiktoken_encoder = tiktoken.get_encoding("o200k_base")
        logger.info("Initialized tiktoken encoder (o200k_base)")

        llm_client = create_llm_client(LLM_PROVIDER)
        orchestrator = ChatOrchestrator(
            llm_client=llm_client,
            models=default_models(LLM_PROVIDER),
            token_counter=_count_tokens
        )
        logger.info(f"Initialized ChatOrchestrator with models: {orchestrator.models}")

        report_builder = ReportBuilder()
        logger.info("Initialized ReportBuilder")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same 500 {error} shape as every other failure."""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    if request.url.path.endswith("/report"):
        return _error_response(FAILED_REPORT_MESSAGE)
    return _error_response(FAILED_RESPONSE_MESSAGE)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "FitCoach AI chat API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "fitcoach-ai",
        "version": "1.0.0",
        "provider": LLM_PROVIDER
    }


@app.post("/api/chat", response_model=ChatResponse)
async def chat_endpoint(request: ChatRequest):
    """
    Reply to the latest turn of a conversation.

    The whole history is flattened into one prompt and sent to the provider
    with per-model retries and model fallback.

    Args:
        request: ChatRequest with the ordered message history

    Returns:
        ChatResponse with the coach's reply, or a 500 {error} payload
    """
    try:
        turns = request.to_turns()
        logger.info(f"Processing chat request with {len(turns)} messages")

        result = await orchestrator.reply(turns)

        if not result.ok:
            logger.error(f"Chat failed: code={result.error.code}, message={result.error.message}")
            if result.error.code == MODELS_UNAVAILABLE:
                return _error_response(HIGH_DEMAND_MESSAGE)
            return _error_response(FAILED_RESPONSE_MESSAGE)

        logger.info(f"Chat reply from {result.model_used} after {result.calls} call(s)")
        return ChatResponse(message=result.text)

    except Exception as e:
        logger.error(f"Unexpected error processing chat request: {e}", exc_info=True)
        return _error_response(FAILED_RESPONSE_MESSAGE)


@app.post("/api/report")
async def report_endpoint(request: ReportRequest):
    """
    Render the session report as a downloadable PDF.

    Args:
        request: ReportRequest with the full transcript

    Returns:
        application/pdf attachment named FitCoach_Report_<date>.pdf
    """
    try:
        generated_at = datetime.now()
        pdf = report_builder.build(request.to_turns(), generated_at)
        filename = report_filename(generated_at)
        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )
    except Exception as e:
        logger.error(f"Unexpected error building report: {e}", exc_info=True)
        return _error_response(FAILED_REPORT_MESSAGE)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting FitCoach AI chat API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
