"""
Arbor Tree API Routes.

REST endpoints for building trees, appending leaves and proofs.
Requires Python 3.11+.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.dependencies import TreeStore, require_tree, require_tree_store
from merkle.digest import Digest
from merkle.errors import (
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidDigestWidthError,
    MalformedDigestError,
    NotFoundError,
)
from merkle.proof import Proof, ProofVerifier
from utils.logger import get_logger

router = APIRouter()
logger = get_logger("api.tree")


class CreateTreeRequest(BaseModel):
    """Request model for building a tree."""

    elements: list[str] = Field(..., description="Hex digests, or raw elements with hash_elements")
    hash_elements: bool = Field(default=False, description="Hash elements before inserting")


class ElementRequest(BaseModel):
    """Request model carrying a single element."""

    element: str = Field(..., min_length=1)
    hash_element: bool = Field(default=False)


class VerifyRequest(ElementRequest):
    """Request model for verifying a proof."""

    proof: dict[str, Any]
    root: str | None = Field(default=None, description="Expected root; defaults to the current root")


class TreeResponse(BaseModel):
    """Response model for a tree summary."""

    root: str
    leaf_count: int
    height: int
    algorithm: str
    levels: list[list[str]] | None = None


class ProofStepResponse(BaseModel):
    """A single proof step."""

    hash: str
    direction: str
    duplicated: bool = False


class ProofResponse(BaseModel):
    """Response model for a proof of inclusion."""

    leaf: str
    index: int
    root: str | None
    steps: list[ProofStepResponse]


class VerifyResponse(BaseModel):
    """Response model for proof verification."""

    included: bool
    computed_root: str
    expected_root: str


def _to_digest(store: TreeStore, element: str, hash_element: bool) -> Digest:
    try:
        if hash_element:
            return store.hasher.hash_element(element)
        return Digest.from_hex(element)
    except MalformedDigestError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=TreeResponse)
async def create_tree(
    request: CreateTreeRequest,
    store: TreeStore = Depends(require_tree_store),
) -> TreeResponse:
    """Build a new tree, replacing the current one."""
    digests = [_to_digest(store, e, request.hash_elements) for e in request.elements]

    try:
        tree = store.replace(digests)
    except (EmptyInputError, InvalidDigestWidthError) as e:
        logger.warning("create_tree_rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    return TreeResponse(**tree.to_dict(include_levels=False))


@router.get("", response_model=TreeResponse)
async def get_tree(
    store: TreeStore = Depends(require_tree_store),
) -> TreeResponse:
    """Get the current tree with every level, leaves first."""
    tree = require_tree(store)
    return TreeResponse(**tree.to_dict())


@router.post("/leaves", response_model=TreeResponse)
async def append_leaf(
    request: ElementRequest,
    store: TreeStore = Depends(require_tree_store),
) -> TreeResponse:
    """Append one leaf to the current tree."""
    digest = _to_digest(store, request.element, request.hash_element)

    try:
        tree = store.append(digest)
    except InvalidDigestWidthError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.debug("leaf_appended", leaves=tree.leaf_count)
    return TreeResponse(**tree.to_dict(include_levels=False))


@router.get("/proof/{index}", response_model=ProofResponse)
async def get_proof_by_index(
    index: int,
    store: TreeStore = Depends(require_tree_store),
) -> ProofResponse:
    """Proof of inclusion for the leaf at an index."""
    tree = require_tree(store)
    try:
        proof = tree.prove(index)
    except IndexOutOfRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ProofResponse(**proof.to_dict())


@router.post("/proof", response_model=ProofResponse)
async def get_proof_by_value(
    request: ElementRequest,
    store: TreeStore = Depends(require_tree_store),
) -> ProofResponse:
    """Proof of inclusion for the first leaf equal to an element."""
    tree = require_tree(store)
    digest = _to_digest(store, request.element, request.hash_element)

    try:
        proof, _ = tree.prove_value(digest)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ProofResponse(**proof.to_dict())


@router.post("/verify", response_model=VerifyResponse)
async def verify_proof(
    request: VerifyRequest,
    store: TreeStore = Depends(require_tree_store),
) -> VerifyResponse:
    """Recompute a root from a supplied proof and compare."""
    digest = _to_digest(store, request.element, request.hash_element)

    try:
        proof = Proof.from_dict(request.proof)
        if request.root is not None:
            expected = Digest.from_hex(request.root)
        else:
            expected = require_tree(store).root
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid proof: {e}")

    verifier = ProofVerifier(store.hasher)
    computed = verifier.compute_root(proof, digest)
    return VerifyResponse(
        included=computed == expected,
        computed_root=computed.hex(),
        expected_root=expected.hex(),
    )
