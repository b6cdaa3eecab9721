from django.contrib import admin
from .models import Post, PostComment, PostLike


class PostCommentInline(admin.TabularInline):
    model = PostComment
    extra = 0
    fields = ['author', 'content', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ['author', 'content', 'created_at']
    search_fields = ['content', 'author__email']
    inlines = [PostCommentInline]


admin.site.register(PostLike)
