from pydantic import BaseModel


class CustomizationUploadData(BaseModel):
    success: bool = True
    original_file_id: str
    shaped_file_id: str
    original_url: str
    shaped_url: str
    shape: str
    width: int
    height: int
    session_id_used: str
    message: str = "Image customized and uploaded successfully"


class CustomizationUploadResponse(BaseModel):
    success: bool = True
    data: CustomizationUploadData
    message: str = "Image uploaded successfully"


class SessionCleanupResponse(BaseModel):
    success: bool = True
    message: str
    files_deleted: int


class SessionInfoResponse(BaseModel):
    session_id: str
    folder_path: str


class HealthResponse(BaseModel):
    status: str = "ok"
