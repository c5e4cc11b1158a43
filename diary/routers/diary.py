# diary router — renders the workspace view and dispatches editor and list intents
# every response is the full view so the client can re-render from it

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from diary.dependencies import get_workspace
from diary.models.entry import AttachmentAdd, DiaryView, DraftUpdate, ImageAdd, TabChange
from diary.state.errors import DraftFieldError, DraftValidationError, StoreOperationError
from diary.state.workspace import DiaryWorkspace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/diary", tags=["diary"])


async def _render(workspace: DiaryWorkspace) -> DiaryView:
    """view after any snapshot already pushed by the store has been applied"""
    await workspace.settled()
    return workspace.view()


@router.get("", response_model=DiaryView)
async def get_view(workspace: DiaryWorkspace = Depends(get_workspace)):
    return await _render(workspace)


# draft

@router.patch("/draft", response_model=DiaryView)
async def update_draft(
    body: DraftUpdate,
    workspace: DiaryWorkspace = Depends(get_workspace),
):
    """write the given editor fields into the draft"""
    try:
        workspace.update_fields(body.model_dump(exclude_unset=True))
    except DraftFieldError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    return await _render(workspace)


@router.post("/draft/reset", response_model=DiaryView)
async def reset_draft(workspace: DiaryWorkspace = Depends(get_workspace)):
    """start a new entry"""
    workspace.draft.reset()
    return await _render(workspace)


@router.post("/draft/save", response_model=DiaryView, status_code=status.HTTP_201_CREATED)
async def save_draft(workspace: DiaryWorkspace = Depends(get_workspace)):
    """save the draft as a new entry"""
    try:
        entry_id = await workspace.save()
    except DraftValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    except StoreOperationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    logger.info(f"Draft saved as {entry_id} for user {workspace.identity.id}")
    return await _render(workspace)


@router.post("/draft/images", response_model=DiaryView, status_code=status.HTTP_201_CREATED)
async def add_image(body: ImageAdd, workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.draft.add_image(body.url, name=body.name, local_ref=body.local_ref)
    return await _render(workspace)


@router.delete("/draft/images/{image_id}", response_model=DiaryView)
async def remove_image(image_id: int, workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.draft.remove_image(image_id)
    return await _render(workspace)


@router.post("/draft/attachments", response_model=DiaryView, status_code=status.HTTP_201_CREATED)
async def add_attachment(body: AttachmentAdd, workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.draft.add_attachment(body.name, body.size_bytes, local_ref=body.local_ref)
    return await _render(workspace)


@router.delete("/draft/attachments/{attachment_id}", response_model=DiaryView)
async def remove_attachment(attachment_id: int, workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.draft.remove_attachment(attachment_id)
    return await _render(workspace)


# entries

@router.post("/entries/{entry_id}/select", response_model=DiaryView)
async def select_entry(entry_id: str, workspace: DiaryWorkspace = Depends(get_workspace)):
    """open a saved entry in the editor"""
    await workspace.settled()
    entry = workspace.projection.find(entry_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Entry not found",
        )
    workspace.select_entry(entry)
    return await _render(workspace)


@router.delete("/entries/{entry_id}", response_model=DiaryView)
async def delete_entry(entry_id: str, workspace: DiaryWorkspace = Depends(get_workspace)):
    try:
        await workspace.delete(entry_id)
    except StoreOperationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return await _render(workspace)


# navigation

@router.put("/tab", response_model=DiaryView)
async def change_tab(body: TabChange, workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.set_tab(body.tab)
    return await _render(workspace)


@router.post("/view-all", response_model=DiaryView)
async def view_all(workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.view_all()
    return await _render(workspace)


@router.post("/sidebar/open", response_model=DiaryView)
async def open_sidebar(workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.open_sidebar()
    return await _render(workspace)


@router.post("/sidebar/close", response_model=DiaryView)
async def close_sidebar(workspace: DiaryWorkspace = Depends(get_workspace)):
    workspace.close_sidebar()
    return await _render(workspace)
