"""
FastAPI backend service for statement parsing.
"""
from fastapi import FastAPI, File, Form, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import tempfile
import shutil
import os
from pathlib import Path
import logging
from typing import Optional

from statement_parser import parse, load_text, TextExtractionError

TEXT_SAMPLE_CHARS = 1000

app = FastAPI(title="BillBuddy Statement Parser", version="1.0.0")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"ok": True}


@app.post("/api/parse")
async def parse_pdf(pdf: Optional[UploadFile] = File(None), bank: Optional[str] = Form(None)):
    """
    Parse an uploaded statement PDF.

    Args:
        pdf: Uploaded PDF file
        bank: Preferred bank (optional)

    Returns:
        Arbitration result plus the start of the extracted text
    """
    if pdf is None or not pdf.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    suffix = Path(pdf.filename).suffix or ".pdf"
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp_file:
        shutil.copyfileobj(pdf.file, tmp_file)
        tmp_path = Path(tmp_file.name)

    try:
        logger.info(f"Processing upload: {pdf.filename}")
        text = load_text(tmp_path)
        result = parse(text, bank_hint=bank)

        logger.info(f"Parsed {pdf.filename} with {result.bank_used}: "
                    f"{len(result.parsed.transactions)} transactions found")

        content = {"bankSelected": bank}
        content.update(result.model_dump(mode="json", by_alias=True))
        content["textSample"] = text[:TEXT_SAMPLE_CHARS]
        return JSONResponse(content=content)

    except TextExtractionError as e:
        logger.warning(f"No text extracted from {pdf.filename}: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logger.error(f"Error parsing statement: {e}")
        raise HTTPException(status_code=500, detail=f"Error parsing statement: {str(e)}")

    finally:
        # Clean up temporary file
        if tmp_path.exists():
            tmp_path.unlink()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
