import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run("titulky_subtitles.app:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
