"""
test_api_chat.py - Chat API E2E 테스트

엔드포인트:
- POST /api/chat
- POST /api/chat/command
"""

from conftest import FakeDrive, folder

from driveplacer.app.providers.base import ChatMessage, CompletionError


class TestChat:
    """POST /api/chat."""

    def test_reply(self, make_client, make_provider):
        provider = make_provider(chat_answer="You have 2 folders.")
        client = make_client(provider=provider)

        response = client.post(
            "/api/chat",
            json={
                "messages": [{"role": "user", "content": "how many folders?"}],
                "driveContext": "Folders: Finance, Marketing",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "You have 2 folders."}
        messages, system_prompt = provider.chat.call_args.args
        assert messages == [ChatMessage("user", "how many folders?")]
        assert system_prompt.endswith("Folders: Finance, Marketing")

    def test_no_login_required(self, make_client, make_provider):
        """대화는 세션 없이 동작."""
        client = make_client(provider=make_provider())

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.json()["success"] is True

    def test_ai_not_configured(self, make_client):
        client = make_client()

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "AI not configured"}

    def test_provider_failure(self, make_client, make_provider):
        provider = make_provider(error=CompletionError("CHAT_FAILED", "AI service timed out"))
        client = make_client(provider=provider)

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.json() == {"success": False, "message": "AI service timed out"}


class TestChatCommand:
    """POST /api/chat/command."""

    def test_create_folder(self, make_client):
        drive = FakeDrive()
        client = make_client(drive)

        response = client.post(
            "/api/chat/command", json={"message": "Create a folder called Receipts"}
        )

        data = response.json()
        assert data["success"] is True
        assert data["intent"] == "create_folder"
        assert data["message"] == '✅ Created folder "Receipts"!'
        assert drive.folders[-1]["name"] == "Receipts"

    def test_search(self, make_client):
        client = make_client(FakeDrive(folders=[folder("1", "Receipts")]))

        response = client.post("/api/chat/command", json={"message": "find receipts"})

        data = response.json()
        assert data["intent"] == "search"
        assert data["message"].startswith("Found 1 item(s):")

    def test_chat_fallthrough_uses_history(self, make_client, make_provider):
        provider = make_provider(chat_answer="Sure.")
        client = make_client(FakeDrive(), provider=provider)

        response = client.post(
            "/api/chat/command",
            json={
                "message": "thanks",
                "history": [
                    {"role": "assistant", "content": "Welcome!"},
                    {"role": "user", "content": "hello"},
                    {"role": "assistant", "content": "Hi"},
                ],
            },
        )

        assert response.json()["message"] == "Sure."
        messages = provider.chat.call_args.args[0]
        assert [m.content for m in messages] == ["hello", "Hi", "thanks"]

    def test_drive_intent_requires_login(self, make_client):
        client = make_client()

        response = client.post("/api/chat/command", json={"message": "show latest file"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authenticated"}

    def test_chat_intent_without_login(self, make_client, make_provider):
        client = make_client(provider=make_provider(chat_answer="Hello!"))

        response = client.post("/api/chat/command", json={"message": "hello"})

        assert response.status_code == 200
        assert response.json()["message"] == "Hello!"
