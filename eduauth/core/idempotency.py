# eduauth/core/idempotency.py
from hashlib import sha256

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from sqlalchemy import select

from eduauth.models.idempotency import IdempotencyKey

class IdempotencyMiddleware(BaseHTTPMiddleware):
    """
    Repete a resposta gravada quando um POST/PUT/PATCH/DELETE volta com o mesmo
    ``Idempotency-Key``. Só respostas 2xx são gravadas; um retry após falha
    executa de novo.
    """

    @staticmethod
    def signature(method: str, path: str, auth: str, body: bytes) -> str:
        h = sha256()
        for part in (method.encode(), path.encode(), auth.encode(), body):
            h.update(part)
            h.update(b"\x00")
        return h.hexdigest()

    async def dispatch(self, request: Request, call_next):
        if request.method not in {"POST", "PUT", "PATCH", "DELETE"}:
            return await call_next(request)

        key = request.headers.get("Idempotency-Key")
        if not key:
            return await call_next(request)
        key = key[:80]

        body = await request.body()
        signature = self.signature(request.method, request.url.path, request.headers.get("Authorization", ""), body)
        with request.app.state.session_factory() as db:
            exists = db.execute(
                select(IdempotencyKey).where(IdempotencyKey.key == key, IdempotencyKey.signature == signature)
            ).scalars().first()
            if exists:
                return Response(content=exists.response_body, media_type=exists.response_mime,
                                status_code=exists.status_code, headers={"Idempotent-Replay": "true"})

        response = await call_next(request)
        if not 200 <= response.status_code < 300:
            return response

        content = b""
        async for chunk in response.body_iterator:
            content += chunk
        with request.app.state.session_factory() as db:
            db.add(IdempotencyKey(key=key, signature=signature, response_body=content,
                                  response_mime=response.media_type or "application/json",
                                  status_code=response.status_code))
            db.commit()
        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
        return Response(content=content, status_code=response.status_code, headers=headers,
                        media_type=response.media_type)
